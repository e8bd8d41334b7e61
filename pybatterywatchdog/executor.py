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
import subprocess

from pybatterywatchdog.errors import LaunchError

log = logging.getLogger(__name__)

SHELL = "/bin/sh"


class CommandRunner():
    def __init__(self, command, shell=SHELL, timeout=None):
        # command is either a full command line or a list of tokens joined by single spaces
        if isinstance(command, str):
            self.command_line = command
        else:
            self.command_line = " ".join(command)
        self.shell = shell
        self.timeout = timeout

    def run(self):
        """Run the command line through the shell and block until it exits.

        Returns the exit status, which callers are free to ignore. Raises LaunchError
        if the shell itself cannot be started. With a timeout set, a command still
        running after that many seconds is killed.
        """
        log.debug("Spawning {} -c {!r}".format(self.shell, self.command_line))
        try:
            process = subprocess.Popen([self.shell, "-c", self.command_line])
        except OSError as e:
            raise LaunchError(self.shell, e) from e

        try:
            returncode = process.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            log.warning("Command did not finish within {} seconds, killing it".format(self.timeout))
            process.kill()
            returncode = process.wait()
        log.debug("Command exited with status {}".format(returncode))
        return returncode
