# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Utilities for the network access subsystem."""

from collections import OrderedDict


def sudo(command_args):
    """Wrap the command arguments in a non-interactive sudo command."""
    return ["sudo", "-n", *command_args]


def unique(iterable):
    """Return the items of `iterable` without duplicates, keeping order."""
    return list(OrderedDict.fromkeys(iterable))
