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

import collections
import logging
import time

log = logging.getLogger(__name__)

UNKNOWN = "Unknown"
CHARGING = "Charging"
DISCHARGING = "Discharging"
EMPTY = "Empty"
FULL = "Full"

BatterySample = collections.namedtuple("BatterySample", ["device_id", "state", "percentage"])


class NotificationState():
    """Debounce flags, one per battery device, for the lifetime of the process."""

    def __init__(self):
        self._notified = {}

    def is_notified(self, device_id):
        return self._notified.get(device_id, False)

    def mark_notified(self, device_id):
        self._notified[device_id] = True

    def clear(self, device_id):
        self._notified[device_id] = False


class BatteryWatchdog():
    """Polls an enumerator for battery samples and runs a command once per discharge episode.

    The enumerator must provide ``samples()``, an iterable of BatterySample, and the
    runner must provide ``run()`` and ``command_line``. Both raise WatchdogError
    subclasses on failure, which are left to propagate.
    """

    def __init__(self, enumerator, runner, config_namespace, sleep=time.sleep, notification_state=None):
        self.percentage = float(config_namespace.percentage)
        self.polling_period = float(config_namespace.polling_period)

        self._enumerator = enumerator
        self._runner = runner
        self._sleep = sleep
        self.notification_state = notification_state if notification_state is not None \
            else NotificationState()

    def process_sample(self, sample):
        # Returns True if the command was executed for this sample
        if sample.state == CHARGING:
            if self.notification_state.is_notified(sample.device_id):
                log.debug("- {} is charging, re-arming".format(sample.device_id))
            self.notification_state.clear(sample.device_id)
        elif sample.state == DISCHARGING and not self.notification_state.is_notified(sample.device_id):
            log.info("- charge: {}".format(sample.percentage))
            if sample.percentage < self.percentage:
                log.info("Executing command: {}".format(self._runner.command_line))
                self._runner.run()
                self.notification_state.mark_notified(sample.device_id)
                return True
        return False

    def poll_once(self):
        samples = []
        for sample in self._enumerator.samples():
            log.info("{}".format(sample))
            self.process_sample(sample)
            samples.append(sample)
        if not samples:
            log.debug("No battery reported this poll")
        return samples

    def run(self):
        log.info("Watching batteries every {} seconds, threshold {}%".format(
            self.polling_period, self.percentage))
        while True:
            self.poll_once()
            self._sleep(self.polling_period)
