# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Configuration for network access control.

`AccessConfiguration` defines a set of attributes which are the
configuration variables. Each is declared as a `ConfigurationOption`, with
a `formencode` validator and a sensible default.

The configuration is a YAML mapping in the file named by the environment
variable ``CAPTIVE_ACCESS_CONFIG``, falling back to
``/etc/captive-portal/access.conf``. A missing file means all defaults::

  with AccessConfiguration.open() as config:
      print(config.whitelist_command, config.tool_timeout)

"""

__all__ = [
    "AccessConfiguration",
    "ConfigurationFile",
    "ConfigurationImmutable",
]

from contextlib import contextmanager
from os import environ

from formencode import ForEach
from formencode.api import is_validator, NoDefault
from formencode.validators import Number
import yaml

from captiveaccess.dhcp.leases import DEFAULT_LEASES_FILE
from captiveaccess.resolver import DEFAULT_MAC_HEADER
from captiveaccess.utils.config import (
    AbsolutePathString,
    OneWayStringBool,
    UnicodeString,
)
from captiveaccess.utils.shell import DEFAULT_TOOL_TIMEOUT
from captiveaccess.whitelist import DEFAULT_WHITELIST_COMMAND


class ConfigurationImmutable(Exception):
    """The configuration is read-only; it cannot be mutated."""


class ConfigurationFile:
    """Store configuration as YAML in a file.

    The file is only ever read; it belongs to whoever administers the
    portal.
    """

    def __init__(self, path):
        super().__init__()
        self.config = {}
        self.path = path

    def __iter__(self):
        return iter(self.config)

    def __getitem__(self, name):
        return self.config[name]

    def __setitem__(self, name, data):
        raise ConfigurationImmutable(f"{self}: Cannot set `{name}'.")

    def __delitem__(self, name):
        raise ConfigurationImmutable(f"{self}: Cannot delete `{name}'.")

    def load(self):
        """Load the configuration.

        A file that does not exist is the same as an empty one.
        """
        try:
            with open(self.path, "rb") as fd:
                config = yaml.safe_load(fd)
        except FileNotFoundError:
            config = None
        if config is None:
            self.config = {}
        elif isinstance(config, dict):
            self.config = config
        else:
            raise ValueError(
                "Configuration in %s is not a mapping: %r"
                % (self.path, config)
            )

    def __str__(self):
        return f"{self.__class__.__qualname__}({self.path!r})"

    @classmethod
    @contextmanager
    def open(cls, path: str):
        """Open a configuration file read-only."""
        configfile = cls(path)
        configfile.load()
        yield configfile


class ConfigurationMeta(type):
    """Metaclass for configuration objects.

    :cvar envvar: The name of the environment variable which will be used to
        store the filename of the configuration file.
    :cvar default: If the environment variable named by `envvar` is not set,
        this is used as the filename.
    :cvar backend: The class used to load the configuration. This must provide
        an ``open(filename)`` method that returns a context manager. This
        context manager must provide an object with a dict-like interface.
    """

    envvar = None  # Set this in subtypes.
    default = None  # Set this in subtypes.
    backend = None  # Set this in subtypes.

    def _get_default_filename(cls):
        filename = environ.get(cls.envvar)
        if filename is None or len(filename) == 0:
            return cls.default
        else:
            return filename

    def _set_default_filename(cls, filename):
        environ[cls.envvar] = filename

    def _delete_default_filename(cls):
        environ.pop(cls.envvar, None)

    DEFAULT_FILENAME = property(
        _get_default_filename,
        _set_default_filename,
        _delete_default_filename,
        doc=(
            "The default configuration file to load. Refers to "
            "`cls.envvar` in the environment."
        ),
    )


class Configuration:
    """An object that holds configuration options.

    Configuration options should be defined by creating properties using
    `ConfigurationOption`.
    """

    # Define this class variable in sub-classes. Using `ConfigurationMeta` as
    # a metaclass is a good way to achieve this.
    DEFAULT_FILENAME = None

    def __init__(self, store):
        """Initialise a new `Configuration` object.

        :param store: A dict-like object.
        """
        super().__init__()
        # Use the super-class's __setattr__() because it's redefined later on
        # to prevent accidentally setting attributes that are not options.
        super().__setattr__("store", store)

    def __setattr__(self, name, value):
        """Prevent setting unrecognised options.

        Only options that have been declared on the class, using the
        `ConfigurationOption` descriptor for example, can be set.
        """
        if hasattr(self.__class__, name):
            super().__setattr__(name, value)
        else:
            raise AttributeError(
                "%r object has no attribute %r"
                % (self.__class__.__name__, name)
            )

    @classmethod
    @contextmanager
    def open(cls, filepath=None):
        if filepath is None:
            filepath = cls.DEFAULT_FILENAME
        with cls.backend.open(filepath) as store:
            yield cls(store)


class ConfigurationOption:
    """Define a configuration option.

    This is for use with `Configuration` and its subclasses.
    """

    def __init__(self, name, doc, validator):
        """Initialise a new `ConfigurationOption`.

        :param name: The name for this option. This is the name as which this
            option will be stored in the underlying `Configuration` object.
        :param doc: A description of the option. This is mandatory.
        :param validator: A `formencode.validators.Validator`.
        """
        super().__init__()

        assert isinstance(name, str)
        assert isinstance(doc, str)
        assert is_validator(validator)
        assert validator.if_missing is not NoDefault

        self.name = name
        self.__doc__ = doc
        self.validator = validator

    def __get__(self, obj, type=None):
        if obj is None:
            return self
        else:
            try:
                value = obj.store[self.name]
            except KeyError:
                return self.validator.if_missing
            else:
                return self.validator.to_python(value)

    def __set__(self, obj, value):
        obj.store[self.name] = self.validator.to_python(value)

    def __delete__(self, obj):
        del obj.store[self.name]


class AccessConfigurationMeta(ConfigurationMeta):
    """Local meta-configuration for network access control."""

    envvar = "CAPTIVE_ACCESS_CONFIG"
    default = "/etc/captive-portal/access.conf"
    backend = ConfigurationFile


class AccessConfiguration(Configuration, metaclass=AccessConfigurationMeta):
    """Local configuration for network access control."""

    # Whitelist options.
    whitelist_command = ConfigurationOption(
        "whitelist_command",
        "The command that adds, removes, and lists whitelisted MACs.",
        UnicodeString(if_missing=DEFAULT_WHITELIST_COMMAND),
    )
    whitelist_use_sudo = ConfigurationOption(
        "whitelist_use_sudo",
        "Whether to run the whitelist command with `sudo -n`.",
        OneWayStringBool(if_missing=False),
    )

    # Sources for MAC resolution.
    neighbour_command = ConfigurationOption(
        "neighbour_command",
        "The command that prints the neighbour (ARP) table. A client's "
        "address is appended to it for single lookups.",
        ForEach(
            UnicodeString(),
            convert_to_list=True,
            if_missing=["arp", "-an"],
        ),
    )
    leases_file = ConfigurationOption(
        "leases_file",
        "The DHCP server's leases file.",
        AbsolutePathString(if_missing=DEFAULT_LEASES_FILE),
    )
    tool_timeout = ConfigurationOption(
        "tool_timeout",
        "Seconds to wait for an external command before killing it.",
        Number(min=1, max=300, if_missing=DEFAULT_TOOL_TIMEOUT),
    )

    # Trusting upstream devices.
    mac_header = ConfigurationOption(
        "mac_header",
        "The request header in which an upstream device forwards the "
        "client's MAC address.",
        UnicodeString(if_missing=DEFAULT_MAC_HEADER),
    )
    trust_mac_header = ConfigurationOption(
        "trust_mac_header",
        "Whether to believe the MAC address in `mac_header` without "
        "checking it against the neighbour table.",
        OneWayStringBool(if_missing=True),
    )
