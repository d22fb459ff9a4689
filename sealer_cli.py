import argparse
import sys
from datetime import datetime

from domain.errors import SealerError
from infra.config import load_config
from protocol.reply_parser import describe_error_code
from sealer_driver import AlpsSealerDriver
from transport.simulated_sealer import SimulatedSealer


# ---------------------------------------------------------------------------
# Simple console logger
# ---------------------------------------------------------------------------
def log(msg: str) -> None:
    ts = datetime.now().strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def quiet(_msg: str) -> None:
    pass


# ---------------------------------------------------------------------------
# Sub-commands. Each takes (driver, args) and prints a one-line result.
# ---------------------------------------------------------------------------
def cmd_status(driver, args):
    status = driver.get_status()
    print(f"Raw status: {status.raw:02X}")
    print("Status bits:")
    for flag in status.describe_active(exclude_no_fail=False):
        print(f"- {flag}")


def cmd_connect(driver, args):
    driver.connect()
    print("Connection and initialization successful")


def cmd_seal(driver, args):
    overrides = {
        name: value
        for name, value in (
            ("temperature", args.temperature),
            ("seal_time", args.seal_time),
            ("seal_force", args.seal_force),
            ("seal_length", args.seal_length),
        )
        if value is not None
    }
    run = driver.start_sealing(**overrides)
    print(f"Sealing operation completed: {' -> '.join(s.value for s in run.history)}")


def cmd_temp(driver, args):
    print(f"Temperature: {driver.get_set_temperature()}°C")


def cmd_actualtemp(driver, args):
    print(f"Temperature: {driver.get_actual_temperature()}°C")


def cmd_settemp(driver, args):
    driver.set_temperature(args.value)
    print(f"Sealing temperature set to {args.value}°C")


def cmd_sealtime(driver, args):
    if args.value is None:
        print(f"Sealing time: {driver.get_seal_time():.1f} seconds")
    else:
        driver.set_seal_time(args.value)
        print(f"Sealing time set to {args.value} seconds")


def cmd_sealforce(driver, args):
    if args.value is None:
        print(f"Sealing force: {driver.get_seal_force()} Kg")
    else:
        driver.set_seal_force(args.value)
        print("Sealing force set successfully")


def cmd_seallength(driver, args):
    if args.value is None:
        print(f"Seal length: {driver.get_seal_length()} mm")
    else:
        driver.set_seal_length(args.value)
        print("Seal length set successfully")


def cmd_driveon(driver, args):
    if args.value is None:
        print(f"Drive distance: {driver.get_drive_on_distance():.3f} mm")
    else:
        driver.set_drive_on_distance(args.value)
        print("Drive-on distance set successfully")


def cmd_enableforce(driver, args):
    driver.enable_force_sensor()
    print("Force sensor enabled")


def cmd_disableforce(driver, args):
    driver.disable_force_sensor()
    print("Force sensor disabled")


def cmd_shuttlein(driver, args):
    driver.shuttle_in()
    print("Shuttle moved inside")


def cmd_shuttleout(driver, args):
    driver.shuttle_out()
    print("Shuttle moved to load position")


def cmd_version(driver, args):
    print(f"Software version: {driver.get_version()}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="alps-sealer", description="ALPS 5000 plate sealer command line tool")
    ap.add_argument("--port", help="Serial port (e.g. 13 for COM13, or /dev/ttyUSB0)")
    ap.add_argument("--config", default=None, help="Path to YAML configuration file")
    ap.add_argument("--simulate", action="store_true", help="Talk to an in-memory simulated sealer")
    ap.add_argument("--quiet", action="store_true", help="Do not print protocol log lines")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("status", help="Get device status").set_defaults(func=cmd_status)
    sub.add_parser("connect", help="Connect and initialize the device").set_defaults(func=cmd_connect)

    seal = sub.add_parser("seal", help="Run a full sealing operation")
    seal.add_argument("--temperature", type=int, help="Sealing temperature in °C")
    seal.add_argument("--seal-time", help="Sealing time in seconds (0-9.9)")
    seal.add_argument("--seal-force", type=int, help="Sealing force in Kg (5-50)")
    seal.add_argument("--seal-length", type=int, help="Seal length in mm (110-128)")
    seal.set_defaults(func=cmd_seal)

    sub.add_parser("temp", help="Get temperature setpoint").set_defaults(func=cmd_temp)
    sub.add_parser("actualtemp", help="Get actual sealing temperature").set_defaults(func=cmd_actualtemp)
    settemp = sub.add_parser("settemp", help="Set sealing temperature")
    settemp.add_argument("value", type=int)
    settemp.set_defaults(func=cmd_settemp)

    for name, func, kind, text in (
        ("sealtime", cmd_sealtime, str, "Get/Set sealing time (0-9.9 seconds)"),
        ("sealforce", cmd_sealforce, int, "Get/Set sealing force (5-50 Kg)"),
        ("seallength", cmd_seallength, int, "Get/Set seal length (110-128 mm)"),
        ("driveon", cmd_driveon, str, "Get/Set drive-on distance (mm)"),
    ):
        p = sub.add_parser(name, help=text)
        p.add_argument("value", nargs="?", type=kind, default=None)
        p.set_defaults(func=func)

    sub.add_parser("enableforce", help="Enable force sensor").set_defaults(func=cmd_enableforce)
    sub.add_parser("disableforce", help="Disable force sensor").set_defaults(func=cmd_disableforce)
    sub.add_parser("shuttlein", help="Move shuttle inside").set_defaults(func=cmd_shuttlein)
    sub.add_parser("shuttleout", help="Move shuttle to load position").set_defaults(func=cmd_shuttleout)
    sub.add_parser("version", help="Get software version").set_defaults(func=cmd_version)

    errorcode = sub.add_parser("errorcode", help="Describe a device error code")
    errorcode.add_argument("code")
    errorcode.set_defaults(func=None)
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "errorcode":
        print(describe_error_code(args.code))
        return 0

    cfg = load_config(args.config)
    log_fn = quiet if args.quiet else log
    transport = SimulatedSealer() if args.simulate else None
    driver = AlpsSealerDriver(transport, log_fn=log_fn, config=cfg)
    if args.simulate:
        driver.connection_parameters[driver.PORT] = "SIM"
    elif args.port:
        driver.connection_parameters[driver.PORT] = args.port

    try:
        if args.command != "connect":
            driver.open_connection()
        args.func(driver, args)
    except (SealerError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        driver.disconnect()
    return 0


if __name__ == "__main__":
    sys.exit(main())
