#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_inventory
    ~~~~~~~~~~~~~~~~~~~~

    Book status transitions.

    :copyright: (c) 2025 by Authors.
    :license: see LICENSE for more details.
"""

import pytest
from circdesk.core.exceptions import InvalidTransition, InvalidStateError
from circdesk.core.inventory import InventoryStatusMachine, BookEvent
from circdesk.core.models import BookStatus


@pytest.mark.parametrize("current,event,expected", [
    (BookStatus.AVAILABLE, BookEvent.BORROW, BookStatus.BORROWED),
    (BookStatus.RESERVED, BookEvent.BORROW, BookStatus.BORROWED),
    (BookStatus.BORROWED, BookEvent.RETURN, BookStatus.AVAILABLE),
    (BookStatus.AVAILABLE, BookEvent.RESERVE, BookStatus.RESERVED),
    (BookStatus.RESERVED, BookEvent.RESERVE, BookStatus.RESERVED),
    (BookStatus.BORROWED, BookEvent.RESERVE, BookStatus.BORROWED),
    (BookStatus.RESERVED, BookEvent.RELEASE, BookStatus.AVAILABLE),
    (BookStatus.BORROWED, BookEvent.DELETE, BookStatus.DELETED),
    (BookStatus.AVAILABLE, BookEvent.MARK_LOST, BookStatus.LOST),
])
def test_legal_transitions(current, event, expected):
    assert InventoryStatusMachine.can_transition(current, event)
    assert InventoryStatusMachine.apply(current, event) == expected

@pytest.mark.parametrize("current,event", [
    (BookStatus.BORROWED, BookEvent.BORROW),
    (BookStatus.AVAILABLE, BookEvent.RETURN),
    (BookStatus.AVAILABLE, BookEvent.RELEASE),
    (BookStatus.BORROWED, BookEvent.RELEASE),
])
def test_illegal_transitions_raise(current, event):
    assert not InventoryStatusMachine.can_transition(current, event)
    with pytest.raises(InvalidTransition):
        InventoryStatusMachine.apply(current, event)

@pytest.mark.parametrize("status", [BookStatus.DAMAGED, BookStatus.LOST, BookStatus.DELETED])
def test_absorbing_states_permit_nothing(status):
    assert InventoryStatusMachine.is_absorbing(status)
    for event in BookEvent:
        assert not InventoryStatusMachine.can_transition(status, event)

def test_invalid_transition_is_an_invalid_state_error():
    with pytest.raises(InvalidStateError) as excinfo:
        InventoryStatusMachine.apply(BookStatus.DELETED, BookEvent.BORROW)
    assert excinfo.value.code == "invalid_transition"
    assert "DELETED" in excinfo.value.message
