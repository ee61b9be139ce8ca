# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Helpers for configuration validation.

Especially work-arounds for broken `formencode` behaviour.
"""

import os.path

import formencode
import formencode.validators


class UnicodeString(formencode.FancyValidator):
    """A FormEncode `UnicodeString` validator that works.

    The one in `formencode` is... weird.
    """

    not_empty = None
    accept_python = False
    messages = {
        "noneType": "The input must be a Unicode string (not None)",
        "badType": (
            "The input must be a Unicode string (not a %(type)s: %(value)r)"
        ),
    }

    def _validate(self, value, state=None):
        if not isinstance(value, str):
            raise formencode.Invalid(
                self.message(
                    "badType",
                    state,
                    value=value,
                    type=type(value).__qualname__,
                ),
                value,
                state,
            )

    _validate_python = _validate
    _validate_other = _validate

    def empty_value(self, value):
        return ""


class AbsolutePathString(UnicodeString):
    """A validator for an absolute path on the local filesystem.

    The path need not exist yet.
    """

    messages = {"notAbsolute": "%(value)r is not an absolute path"}

    def _validate(self, value, state=None):
        super()._validate(value, state)
        if not os.path.isabs(value):
            raise formencode.Invalid(
                self.message("notAbsolute", state, value=value), value, state
            )

    _validate_python = _validate
    _validate_other = _validate


class OneWayStringBool(formencode.validators.StringBool):
    """A `StringBool` that doesn't convert a boolean back into a string.

    Used for "true" and "false" values, but doesn't convert a boolean back
    to a string.
    """

    def from_python(self, value):
        """Do nothing."""
        return value
