# Copyright 2026 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import logging
from argparse import ArgumentParser, Namespace
from collections import OrderedDict
from enum import IntEnum, auto
from typing import Any, Callable, NamedTuple

import configargparse
import structlog
from structlog.typing import EventDict
from typing_extensions import assert_never

from gasprobe.exception import GasProbeError
from gasprobe.gas_model import GasModel
from gasprobe.measurement import Report

# Exit code when a precondition of the run fails (no connection, fixture not built or deployed).
FATAL_EXIT_CODE = 2


def create_parser(*, prefix: str | None = None, add_help: bool = True) -> ArgumentParser:
    return configargparse.ArgumentParser(auto_env_var_prefix=prefix or 'gasprobe_', add_help=add_help)


def add_node_options(parser: ArgumentParser) -> None:
    """The two options every scenario command takes. Defaults come from the settings file."""
    parser.add_argument('--rpc-url', help='JSON-RPC endpoint of the node under test')
    parser.add_argument('--model', choices=[m.value for m in GasModel],
                        help='Gas model the node is expected to follow')


def level_styles(colors: bool = True) -> dict[str, str]:
    import colorama
    if not colors:
        return {}
    return {
        'critical': colorama.Style.BRIGHT + colorama.Fore.RED,
        'exception': colorama.Fore.RED,
        'error': colorama.Fore.RED,
        'warn': colorama.Fore.YELLOW,
        'warning': colorama.Fore.YELLOW,
        'info': colorama.Fore.GREEN,
        'debug': colorama.Style.BRIGHT + colorama.Fore.CYAN,
        'notset': colorama.Back.RED,
    }


def console_renderer(colors: bool) -> structlog.dev.ConsoleRenderer:
    # docs at http://www.structlog.org/en/stable/api.html#structlog.dev.ConsoleRenderer
    return structlog.dev.ConsoleRenderer(colors=colors, level_styles=level_styles(colors) or None)


class LoggingOutput(IntEnum):
    NULL = auto()
    PRETTY = auto()
    JSON = auto()


class LoggingOptions(NamedTuple):
    debug: bool


def process_logging_output(argv: list[str]) -> LoggingOutput:
    """Extract logging output before argv parsing."""
    parser = create_parser(add_help=False)

    log_args = parser.add_mutually_exclusive_group()
    log_args.add_argument('--json-logs', action='store_true')
    log_args.add_argument('--disable-logs', action='store_true')

    args, remaining_argv = parser.parse_known_args(argv)
    argv.clear()
    argv.extend(remaining_argv)

    if args.json_logs:
        return LoggingOutput.JSON

    if args.disable_logs:
        return LoggingOutput.NULL

    return LoggingOutput.PRETTY


def process_logging_options(argv: list[str]) -> LoggingOptions:
    """Extract logging-specific options that are processed before argv parsing."""
    parser = create_parser(add_help=False)
    parser.add_argument('--debug', action='store_true')

    args, remaining_argv = parser.parse_known_args(argv)
    argv.clear()
    argv.extend(remaining_argv)

    return LoggingOptions(debug=args.debug)


def setup_logging(*, logging_output: LoggingOutput, logging_options: LoggingOptions) -> None:
    import logging.config

    # common timestamper for structlog loggers and foreign (stdlib) loggers
    timestamper = structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S")

    # processors for foreign loggers
    pre_chain = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        timestamper,
    ]

    match logging_output:
        case LoggingOutput.NULL:
            handlers = ['null']
        case LoggingOutput.PRETTY:
            handlers = ['pretty']
        case LoggingOutput.JSON:
            handlers = ['json']
        case _:
            assert_never(logging_output)

    # See: https://docs.python.org/3/library/logging.config.html#configuration-dictionary-schema
    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'colored': {
                '()': structlog.stdlib.ProcessorFormatter,
                'processor': console_renderer(colors=True),
                'foreign_pre_chain': pre_chain,
            },
            'json': {
                '()': structlog.stdlib.ProcessorFormatter,
                'processor': structlog.processors.JSONRenderer(),
                'foreign_pre_chain': pre_chain,
            },
        },
        'handlers': {
            'pretty': {
                'level': 'DEBUG',
                'class': 'logging.StreamHandler',
                'formatter': 'colored',
            },
            'json': {
                'level': 'DEBUG',
                'class': 'logging.StreamHandler',
                'formatter': 'json',
            },
            'null': {
                'class': 'logging.NullHandler',
            },
        },
        'loggers': {
            # requests' connection pool is chatty at debug level
            'urllib3': {
                'handlers': handlers,
                'level': 'INFO' if logging_options.debug else 'WARN',
                'propagate': False,
            },
            '': {
                'handlers': handlers,
                'level': 'DEBUG' if logging_options.debug else 'INFO',
            },
        }
    })

    def kwargs_formatter(_, __, event_dict):
        if event_dict and event_dict.get('event') and isinstance(event_dict['event'], str):
            try:
                event_dict['event'] = event_dict['event'].format(**event_dict)
            except (KeyError, IndexError, ValueError):
                # The event string may contain '{}'s that are not used for formatting.
                pass
        return event_dict

    def drop_secrets(_logger: logging.Logger, _method_name: str, event_dict: EventDict) -> EventDict:
        if 'signer_key' in event_dict:
            event_dict['signer_key'] = '<redacted>'
        return event_dict

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        drop_secrets,
        structlog.stdlib.PositionalArgumentsFormatter(),
        kwargs_formatter,
        timestamper,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]

    structlog.configure(
        processors=processors,
        context_class=OrderedDict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def print_report(report: Report) -> None:
    print()
    for line in report.format_lines():
        print(line)
    print()


def run_and_report(report: Report, run: Callable[[Report], Any]) -> int:
    """Run a scenario into `report` and print it.

    Returns the report's exit code, or FATAL_EXIT_CODE if a precondition failed; in that case the report printed is
    whatever was recorded before the failure.
    """
    logger = structlog.get_logger()
    try:
        run(report)
    except GasProbeError as e:
        logger.error('run aborted', error_type=type(e).__name__, error=str(e))
        print(f'ERROR ({type(e).__name__}): {e}')
        print_report(report)
        return FATAL_EXIT_CODE
    print_report(report)
    return report.exit_code


def resolve_model(args: Namespace, default: GasModel) -> GasModel:
    return GasModel(args.model) if args.model else default

