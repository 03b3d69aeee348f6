#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Active check for the print queues of a host.

The check lists the print queues, re-enables queues that are down and
reports a single Nagios compatible state line."""
