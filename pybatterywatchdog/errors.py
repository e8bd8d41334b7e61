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


class WatchdogError(Exception):
    pass


class EnumerationError(WatchdogError):
    def __init__(self, backend, reason):
        super().__init__(backend, reason)
        self.backend = backend
        self.reason = reason

    def __str__(self):
        return "Could not enumerate batteries through {}: {}".format(self.backend, self.reason)


class DeviceQueryError(WatchdogError):
    def __init__(self, device_id, reason):
        super().__init__(device_id, reason)
        self.device_id = device_id
        self.reason = reason

    def __str__(self):
        return "Could not query battery {}: {}".format(self.device_id, self.reason)


class LaunchError(WatchdogError):
    def __init__(self, shell, reason):
        super().__init__(shell, reason)
        self.shell = shell
        self.reason = reason

    def __str__(self):
        return "Failed to execute command with {}: {}".format(self.shell, self.reason)
