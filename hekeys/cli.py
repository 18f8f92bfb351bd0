import sys
import logging
import argparse

from hekeys.core import drivers
from hekeys.core.errors import HEKeysError
from hekeys.core.scheme import init_scheme

logger = logging.getLogger("hekeys")

DEFAULT_A = [5, 6, 7, 8]
DEFAULT_B = [2, 3, 4, 5]


def _vector(text):
    try:
        return [int(v) for v in text.split(",") if v.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected comma separated integers, got {text!r}") from None


def build_parser():
    parser = argparse.ArgumentParser(
        prog="hekeys",
        description="Generate, publish and load BGV-RNS key material.")
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", "-c", required=True,
                        help="YAML file with bgv_params and hekeys sections")
    common.add_argument("--debug", action="store_true")

    operands = argparse.ArgumentParser(add_help=False)
    operands.add_argument("--a", type=_vector, default=DEFAULT_A)
    operands.add_argument("--b", type=_vector, default=DEFAULT_B)

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("generate", parents=[common],
                   help="generate keys, write the artifacts, purge")
    sub.add_parser("consume", parents=[common, operands],
                   help="load published artifacts and multiply two vectors")
    sub.add_parser("roundtrip", parents=[common, operands],
                   help="generate, publish, purge, reload and multiply")
    sub.add_parser("direct", parents=[common, operands],
                   help="generate and multiply without touching the store")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    scheme = None
    try:
        scheme = init_scheme(args.config)
        if scheme.params.get_debug_status():
            logging.getLogger().setLevel(logging.DEBUG)

        if args.command == "generate":
            ids = drivers.run_custodian(scheme)
            print("SUCCESS: keys serialized to "
                  + ", ".join(scheme.store.location(i) for i in ids.values() if i))
            return 0

        run = {
            "consume": drivers.run_consumer,
            "roundtrip": drivers.run_roundtrip,
            "direct": drivers.run_direct,
        }[args.command]
        result = run(scheme, args.a, args.b)
    except HEKeysError as e:
        logger.error("%s", e)
        if scheme is not None:
            logger.error("Lifecycle stopped in state %s", scheme.state.name)
        return 1

    print(f"Input 1: {args.a}")
    print(f"Input 2: {args.b}")
    print(f"Result: {result.tolist()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
