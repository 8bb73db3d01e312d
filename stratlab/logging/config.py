"""
Logging setup for backtests and optimizer runs.

Every module logs through structlog on top of the stdlib ``logging``
handlers. Optimizer loggers carry ``subsystem="optimizer"`` so a run's phase
changes and pruning decisions can be filtered out of a mixed stream and
replayed in order.
"""
import logging
import sys
from typing import IO, Any, Optional

import structlog
from structlog.types import FilteringBoundLogger, Processor

_CALLSITE = (
    structlog.processors.CallsiteParameter.FILENAME,
    structlog.processors.CallsiteParameter.FUNC_NAME,
    structlog.processors.CallsiteParameter.LINENO,
)


def build_processors(
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list[Processor]] = None
) -> list[Processor]:
    """Processor chain up to, but not including, the renderer."""
    chain: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
    ]
    if include_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    if include_caller:
        chain.append(structlog.processors.CallsiteParameterAdder(parameters=_CALLSITE))

    chain += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    chain.extend(extra_processors or ())
    return chain


def _renderer(format_json: bool, stream: IO[str]) -> Processor:
    if format_json:
        return structlog.processors.JSONRenderer(sort_keys=True)
    # Colour codes only make sense on a terminal
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list[Processor]] = None,
    stream: Optional[IO[str]] = None
) -> None:
    """
    Route structlog through the stdlib root logger.

    Safe to call more than once; the last call wins.

    Args:
        level: Minimum level name, e.g. ``"DEBUG"`` to see prune decisions
        format_json: Emit one JSON object per line instead of console output
        include_timestamp: Add a UTC ISO-8601 ``timestamp`` field
        include_caller: Add file, function and line of the log call
        extra_processors: Processors inserted just before rendering
        stream: Destination, stdout by default
    """
    target = stream if stream is not None else sys.stdout
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        stream=target,
        format="%(message)s",
        force=True
    )

    processors = build_processors(include_timestamp, include_caller, extra_processors)
    processors.append(_renderer(format_json, target))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """Module logger; pass ``__name__``."""
    return structlog.get_logger(name)


def get_backtest_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the backtest subsystem."""
    return get_logger(name).bind(subsystem="backtest")


def get_optimizer_logger(name: str) -> FilteringBoundLogger:
    """
    Logger for optimizer runs.

    Phase transitions and pruning decisions go through this logger so a run
    can be reconstructed from its log stream.
    """
    return get_logger(name).bind(subsystem="optimizer", audit_trail=True)


def log_prune_decision(
    logger: FilteringBoundLogger,
    run_id: str,
    strategy_key: str,
    symbols: tuple,
    pruned: bool,
    best_case_distance: float,
    worst_retained_distance: float
) -> None:
    """
    Record a branch-and-bound decision for one asset combination.

    Logged at DEBUG: a three-asset search makes one decision per
    combination and strategy.

    Args:
        logger: Optimizer logger
        run_id: Optimizer run identifier
        strategy_key: Strategy being evaluated
        symbols: Asset combination
        pruned: Whether the combination was skipped
        best_case_distance: Closest distance any blend could reach
        worst_retained_distance: Distance of the current last retained candidate
    """
    logger.debug(
        "Combination pruned" if pruned else "Combination evaluated",
        run_id=run_id,
        strategy=strategy_key,
        symbols=list(symbols),
        best_case_distance=best_case_distance,
        worst_retained_distance=worst_retained_distance,
        event_type="prune_decision"
    )


def log_state_transition(
    logger: FilteringBoundLogger,
    run_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """Record an optimizer phase change; ``context`` is attached when given."""
    fields: dict[str, Any] = {
        "run_id": run_id,
        "from_state": from_state,
        "to_state": to_state,
        "trigger": trigger,
        "event_type": "state_transition",
    }
    if context:
        fields["context"] = context
    logger.info("State transition", **fields)
