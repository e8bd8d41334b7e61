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

VERSION = 0.3
DEFAULT_CONFIG = {"percentage": 20.0,
                  "polling_period": 30.0,
                  "backend": "upower",
                  "command_timeout": None,
                  "sysfs_root": "/sys/class/power_supply"}
BACKENDS = ("upower", "sysfs")
CONFIG_SECTION = "pybatterywatchdog"
TERSE_DESCRIPTION = "Daemon that runs a command when the battery runs low."
DESCRIPTION = "A small user daemon for GNU/Linux that executes a command once per discharge " \
              "when the battery drops below a threshold"
