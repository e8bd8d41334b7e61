# Copyright 2014 icasdri
#
# This file is part of pybatterywatchdog.
#
# pybatterywatchdog is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# pybatterywatchdog is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with pybatterywatchdog.  If not, see <http://www.gnu.org/licenses/>.
__author__ = 'icasdri'

import logging
import os

from pybatterywatchdog.batterywatchdog import BatterySample, UNKNOWN, CHARGING, DISCHARGING, EMPTY, FULL
from pybatterywatchdog.errors import EnumerationError, DeviceQueryError

log = logging.getLogger(__name__)

SYSFS_ROOT = "/sys/class/power_supply"
SYSFS_STATES = {"Unknown": UNKNOWN,
                "Charging": CHARGING,
                "Discharging": DISCHARGING,
                "Not charging": UNKNOWN,
                "Empty": EMPTY,
                "Full": FULL}


def parse_uevent(path):
    props = {}
    with open(path, encoding="utf-8") as uevent:
        for line in uevent:
            line = line.strip()
            if "=" not in line:
                continue
            key, value = line.split("=", 1)
            if key.startswith("POWER_SUPPLY_"):
                key = key[len("POWER_SUPPLY_"):]
            props[key] = value
    return props


def _percentage(props):
    # Energy and charge counters are more precise than the rounded CAPACITY
    for prefix in ("ENERGY", "CHARGE"):
        now = props.get(prefix + "_NOW")
        full = props.get(prefix + "_FULL")
        if now is not None and full is not None and int(full) > 0:
            return min(100.0, max(0.0, int(now) * 100.0 / int(full)))
    return float(props["CAPACITY"])


class SysfsEnumerator():
    def __init__(self, root=SYSFS_ROOT):
        if not os.path.isdir(root):
            raise EnumerationError("sysfs", "{} is not a directory".format(root))
        self.root = root

    def samples(self):
        try:
            names = sorted(os.listdir(self.root))
        except OSError as e:
            raise EnumerationError("sysfs", e) from e

        for name in names:
            try:
                props = parse_uevent(os.path.join(self.root, name, "uevent"))
            except (OSError, UnicodeDecodeError) as e:
                raise DeviceQueryError(name, e) from e

            # Peripheral batteries (mice, headsets) report SCOPE=Device
            if props.get("TYPE") != "Battery" or props.get("SCOPE") == "Device":
                log.debug("Skipping {}, not a system battery".format(name))
                continue
            try:
                percentage = _percentage(props)
            except (KeyError, ValueError) as e:
                raise DeviceQueryError(name, "no usable charge level ({})".format(e)) from e
            yield BatterySample(name, SYSFS_STATES.get(props.get("STATUS"), UNKNOWN), percentage)
