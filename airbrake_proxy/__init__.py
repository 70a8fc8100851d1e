# SPDX-License-Identifier: MIT
# Copyright (c) 2025 airbrake-proxy contributors

"""airbrake-proxy: accept Airbrake notices and relay them to Airbrake and Sentry."""

__version__ = "0.1.0"
