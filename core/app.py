import argparse
import asyncio

from core import config as defaults
from core.background import BackgroundManager
from core.lifecycle import terminate, wait_for_interrupt
from core.logger import log, setup
from diag import profile, stats
from tcp.client import Dialer
from tcp.payload import make_payload
from tcp.server import Listener
from tcp.state import ConfigError, RunConfig, TcpMode, parse_port


def port_arg(value: str) -> int:
    try:
        return parse_port(value)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="tcppump",
        description="Open many TCP connections and pump bytes through them.",
        allow_abbrev=False,
    )
    ap.add_argument("-host", "--host", default=defaults.TCP_HOST, help="Host IP address")
    ap.add_argument("-port", "--port", type=port_arg, default=defaults.TCP_PORT, help="Port")
    ap.add_argument("-shost", "--shost", default=defaults.SOURCE_HOST, help="Source IP address when dialing")
    ap.add_argument("-sport", "--sport", type=port_arg, default=defaults.SOURCE_PORT, help="Source port when dialing")
    ap.add_argument("-listen", "--listen", action="store_true", help="Listen (server role)")
    ap.add_argument("-size", "--size", type=int, default=defaults.PACKET_SIZE, help="Size of packets to send")
    ap.add_argument("-nconn", "--nconn", type=int, default=defaults.NCONN, help="Number of concurrent connections")
    ap.add_argument("-reqres", "--reqres", action="store_true", help="Request/Response protocol (not implemented)")
    ap.add_argument("-nflight", "--nflight", type=int, default=defaults.NFLIGHT,
                    help="Number of requests in flight before waiting for response (not implemented)")
    ap.add_argument("-profile", "--profile", default=defaults.PROFILE_PREFIX,
                    help="write profile to file with following prefix")
    ap.add_argument("--stats-interval", type=float, default=defaults.STATS_INTERVAL,
                    help="Seconds between runtime stats reports")
    ap.add_argument("--log-level", default=defaults.LOG_LEVEL,
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"], type=str.upper)
    ap.add_argument("args", nargs="*", help=argparse.SUPPRESS)
    return ap


def config_from_args(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        host=args.host,
        port=args.port,
        shost=args.shost,
        sport=args.sport,
        listen=args.listen,
        size=args.size,
        nconn=args.nconn,
        reqres=args.reqres,
        nflight=args.nflight,
        profile=args.profile,
        stats_interval=args.stats_interval,
    )


def loop_exception_handler(loop, context):
    msg = context.get("message", "unhandled event loop error")
    exc = context.get("exception")
    if exc is not None:
        log.error(f"[SYSTEM] {msg}: {exc!r}")
    else:
        log.error(f"[SYSTEM] {msg}")


async def main(run: RunConfig) -> int:
    asyncio.get_running_loop().set_exception_handler(loop_exception_handler)

    background = BackgroundManager()
    if run.profile:
        background.start("profile", profile.run(run.profile))

    payload = make_payload(run.size)
    background.start("stats", stats.run(run.stats_interval))

    try:
        if run.mode == TcpMode.SERVER:
            await Listener(run, payload).serve_forever()
        else:
            await Dialer(run).connect_and_go()
            await wait_for_interrupt()
            terminate(0)
    except OSError as e:
        # the endpoint has already logged the details
        log.debug(f"[SYSTEM] {run.mode.value} startup failed: {e!r}")
    finally:
        await background.stop()

    log.info("Finished execution!")
    return 0


def cli(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup(args.log_level)

    if args.args:
        log.info("Usage:")
        parser.print_help()
        return 0

    try:
        run = config_from_args(args)
    except ConfigError as e:
        parser.error(str(e))

    try:
        return asyncio.run(main(run))
    except KeyboardInterrupt:
        log.info("CTRL-C; exiting")
        return 0


if __name__ == "__main__":
    raise SystemExit(cli())
