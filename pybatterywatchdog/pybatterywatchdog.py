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

import sys
import math
import logging
from pybatterywatchdog.pybatterywatchdogconfig import VERSION, TERSE_DESCRIPTION, DEFAULT_CONFIG, BACKENDS, \
    CONFIG_SECTION
from pybatterywatchdog.batterywatchdog import BatteryWatchdog
from pybatterywatchdog.executor import CommandRunner
from pybatterywatchdog.errors import WatchdogError

log = logging.getLogger(__name__)
package_log = logging.getLogger("pybatterywatchdog")

# Config file options that are not plain strings
_CONFIG_CONVERTERS = {"percentage": float,
                      "polling_period": float,
                      "command_timeout": float,
                      "command": lambda value: [value]}


def _setup_logging(args):
    for handler in list(package_log.handlers):
        package_log.removeHandler(handler)
    if args.debug or args.verbose:
        package_log.setLevel(logging.DEBUG if args.debug else logging.INFO)
        handler = logging.StreamHandler(sys.stdout)
    else:
        package_log.setLevel(logging.WARNING)
        handler = logging.StreamHandler(sys.stderr)
    package_log.addHandler(handler)


def _read_config_file(args, a_parser):
    import os.path
    if args.config_file is None:
        args.config_file = os.path.expanduser("~") + "/.config/pybatterywatchdog.conf"
    if not os.path.isfile(args.config_file):
        return
    log.info("Config file found at " + args.config_file)
    import configparser
    c_parser = configparser.ConfigParser(interpolation=None)
    log.debug("Reading config file...")
    try:
        c_parser.read(args.config_file)
    except configparser.Error as e:
        a_parser.error("invalid config file {}: {}".format(args.config_file, e))
    if CONFIG_SECTION not in c_parser.sections():
        return
    section = c_parser[CONFIG_SECTION]
    for c in section:
        log.debug("Processing config file option '{}'".format(c))
        if c not in DEFAULT_CONFIG and c != "command":
            log.warning("Ignoring unknown config file option '{}'".format(c))
            continue
        if getattr(args, c, None) not in (None, []):
            continue
        converter = _CONFIG_CONVERTERS.get(c, str)
        try:
            setattr(args, c, converter(section[c]))
        except ValueError:
            a_parser.error("config file option '{}' is not a number: {!r}".format(c, section[c]))


def _parse_args(options=None):
    # Command-line arguments
    import argparse
    a_parser = argparse.ArgumentParser(prog="pybatterywatchdog",
                                       description=TERSE_DESCRIPTION)
    a_parser.add_argument("-p", "--percentage", metavar='PERCENT', type=float,
                          help="battery percentage below which to execute the command (default: 20)")
    a_parser.add_argument("-n", "--polling-period", metavar='SECONDS', type=float,
                          help="seconds between battery checks (default: 30)")
    a_parser.add_argument("--command-timeout", metavar='SECONDS', type=float,
                          help="kill the command if it runs longer than this (default: wait forever)")
    a_parser.add_argument("--backend", choices=BACKENDS,
                          help="where to read battery state from (default: upower)")
    a_parser.add_argument("--sysfs-root", metavar='PATH', type=str,
                          help="power supply class directory for the sysfs backend")
    a_parser.add_argument("--config-file", metavar="CONFIG_FILE", type=str,
                          help="configuration file to use")
    a_parser.add_argument("--version", action='version', version="%(prog)s v{}".format(VERSION))
    a_parser.add_argument("-v", "--verbose", action='store_true')
    a_parser.add_argument("--debug", action='store_true')
    a_parser.add_argument("command", nargs='*',
                          help="command to execute when running short on battery, passed to /bin/sh")

    # Parse the arguments
    if options is None:
        args = a_parser.parse_args()
    else:
        args = a_parser.parse_args(options)

    _setup_logging(args)
    log.debug("Received command-line arguments: {}".format(vars(args)))

    _read_config_file(args, a_parser)

    # Defaults
    for c in DEFAULT_CONFIG:
        if c not in args or getattr(args, c) is None:
            log.debug("Using default config for '{}'".format(c))
            setattr(args, c, DEFAULT_CONFIG[c])

    if not args.command:
        a_parser.error("the following arguments are required: command")
    for c in ("percentage", "polling_period", "command_timeout"):
        value = getattr(args, c)
        if value is not None and not math.isfinite(value):
            a_parser.error("{} must be a finite number, got {}".format(c.replace("_", " "), value))
    if args.polling_period <= 0:
        a_parser.error("polling period must be positive, got {}".format(args.polling_period))
    if args.command_timeout is not None and args.command_timeout <= 0:
        a_parser.error("command timeout must be positive, got {}".format(args.command_timeout))
    if args.backend not in BACKENDS:
        a_parser.error("unknown backend '{}', choose from {}".format(args.backend, ", ".join(BACKENDS)))

    return args


def _make_enumerator(args):
    if args.backend == "sysfs":
        from pybatterywatchdog.sysfs import SysfsEnumerator
        return SysfsEnumerator(args.sysfs_root)
    from pybatterywatchdog.upower import UPowerEnumerator
    return UPowerEnumerator()


def entry_point(options=None):
    args = _parse_args(options)
    runner = CommandRunner(args.command, timeout=args.command_timeout)
    return BatteryWatchdog(_make_enumerator(args), runner, args)


def main(options=None):
    try:
        entry_point(options).run()
    except WatchdogError as e:
        log.critical(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        log.info("Interrupted, exiting")
        sys.exit(130)


if __name__ == "__main__":
    main()
