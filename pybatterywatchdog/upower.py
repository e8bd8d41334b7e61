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

import dbus
from dbus.exceptions import DBusException

from pybatterywatchdog.batterywatchdog import BatterySample, UNKNOWN, CHARGING, DISCHARGING, EMPTY, FULL
from pybatterywatchdog.errors import EnumerationError, DeviceQueryError

log = logging.getLogger(__name__)

UPOWER_NAME = "org.freedesktop.UPower"
UPOWER_PATH = "/org/freedesktop/UPower"
UPOWER_IFACE = UPOWER_NAME
DEV_IFACE = "org.freedesktop.UPower.Device"

DEVICE_TYPES = {"Unknown": 0, "Line Power": 1, "Battery": 2}
# Pending Charge / Pending Discharge carry no direction, so they never trigger or re-arm
BATTERY_STATES = {0: UNKNOWN,
                  1: CHARGING,
                  2: DISCHARGING,
                  3: EMPTY,
                  4: FULL,
                  5: UNKNOWN,
                  6: UNKNOWN}


class UPowerEnumerator():
    def __init__(self, system_bus=None):
        try:
            self._system_bus = system_bus if system_bus is not None else dbus.SystemBus()
            self._upower = dbus.Interface(self._system_bus.get_object(UPOWER_NAME, UPOWER_PATH), UPOWER_IFACE)
        except DBusException as e:
            raise EnumerationError("UPower", e) from e

    def _device_paths(self):
        try:
            return list(self._upower.EnumerateDevices())
        except DBusException as e:
            raise EnumerationError("UPower", e) from e

    def samples(self):
        for dev_path in self._device_paths():
            try:
                dev_obj = self._system_bus.get_object(UPOWER_NAME, dev_path)
                props = dbus.Interface(dev_obj, dbus.PROPERTIES_IFACE).GetAll(DEV_IFACE)
            except DBusException as e:
                raise DeviceQueryError(str(dev_path), e) from e

            if props.get("Type") != DEVICE_TYPES["Battery"] or not props.get("PowerSupply"):
                log.debug("Skipping {}, not a power supply battery".format(dev_path))
                continue
            try:
                state = BATTERY_STATES.get(int(props["State"]), UNKNOWN)
                percentage = float(props["Percentage"])
            except (KeyError, TypeError, ValueError) as e:
                raise DeviceQueryError(str(dev_path), e) from e
            log.debug("Battery {} {} ( {} )".format(props.get("Vendor"), props.get("Model"), dev_path))
            yield BatterySample(str(dev_path), state, percentage)
