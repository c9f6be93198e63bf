from __future__ import annotations

import os

import pytest

import config
from assignment import Owner, parse_roster


@pytest.mark.skipif('OPS_ROSTER' in os.environ, reason='OPS_ROSTER overridden in the environment')
def test_default_roster_parses_in_configured_order() -> None:
    roster = parse_roster(config.OPS_ROSTER)
    assert roster == [Owner(uid, name) for uid, name in config.DEFAULT_ROSTER]
    assert [o.name for o in roster] == ['Brazil', 'Nishanth', 'Chethan', 'Derrick']


def test_parse_origins_splits_list() -> None:
    assert config.parse_origins('https://a.example, https://b.example,') == [
        'https://a.example',
        'https://b.example',
    ]


def test_parse_origins_wildcard() -> None:
    assert config.parse_origins('*') == '*'
    assert config.parse_origins('') == '*'
    assert config.parse_origins('https://a.example,*') == '*'
