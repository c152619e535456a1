import argparse
import logging
import pathlib
import sys
from typing import Optional

from .assembly import OUTPUTS, Assembly
from .engines.engine import GeometryEngine
from .generate_configuration import Configuration, GenerateConfigAction, load_configuration


class LogLevelAction(argparse.Action):
    """
    Set the log level
    """

    log_levels = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL,
    }

    def __init__(self, option_strings, dest: str, **kwargs):
        kwargs.update({
            'default': "INFO",
            'type': str,
            'choices': self.log_levels.keys(),
            'help': "The log level to use."
        })
        super().__init__(option_strings, dest, **kwargs)

    def __call__(self, _parser: argparse.ArgumentParser, namespace: argparse.Namespace, values: str, _option_string: Optional[str] = None):
        setattr(namespace, self.dest, values)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate the Lagrange keyboard case.")
    parser.add_argument("--generate-config", action=GenerateConfigAction)
    parser.add_argument("--config", default=None, type=pathlib.Path, help="A config file to control keyboard generation.")
    parser.add_argument("--set", dest="overrides", action="append", default=[], metavar="KEY=VALUE",
                        help="Override a configuration value.  Values are parsed as JSON.")
    parser.add_argument("--log-level", action=LogLevelAction)
    parser.add_argument("parts", nargs="*", metavar="PART",
                        help=f"The parts to build, out of: {', '.join(OUTPUTS)}.")
    return parser


def create_engine(config: Configuration) -> GeometryEngine:
    logging.info("Using engine %s", config.engine)
    if config.engine == 'cadquery':
        from .engines.cadquery_engine import CadQueryEngine
        return CadQueryEngine()
    if config.engine == 'solid':
        from .engines.solid_engine import SolidEngine
        return SolidEngine()
    raise ValueError(f"Unknown engine `{config.engine}'")


def run(args: argparse.Namespace) -> int:
    config = load_configuration(args.config, args.overrides)
    assembly = Assembly(config, create_engine(config))

    status = 0
    for name in args.parts:
        if name not in OUTPUTS:
            logging.error("No part `%s'.", name)
            status = 1
            continue
        assembly.export(name, assembly.build(name))
    return status


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level)
    return run(args)


if __name__ == '__main__':
    sys.exit(main())
