# Copyright 2026 Canonical Ltd.  This software is licensed under the
# GNU Affero General Public License version 3 (see the file LICENSE).

"""Network access control for the captive portal.

Works out which device is behind a request and lets it through the firewall
by adding its MAC address to the external whitelist.
"""
