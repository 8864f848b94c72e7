"""
Kijo Simulator - Configuration
==============================

Configuration for the machine and for command-line runs. Values come
from:
- Default values (defined here)
- Environment variables (RunConfig.from_env)
- Command-line options, which override both

Copyright (c) 2026 Kijo Simulator Contributors
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional
import codecs
import os


@dataclass(frozen=True)
class MachineConfig:
    """
    Configuration for machine construction.

    Attributes:
        input_encoding: Codec used to turn the runtime input text into the
            input byte buffer (default: "utf-8")

    Example:
        >>> machine = Machine(MachineConfig(input_encoding="latin-1"))
    """
    input_encoding: str = "utf-8"

    def __post_init__(self) -> None:
        # Unknown encodings raise LookupError
        codecs.lookup(self.input_encoding)


@dataclass
class RunConfig:
    """
    Configuration for running a program to completion.

    Attributes:
        max_steps: Upper bound on executed instructions (default: 10,000).
            Programs that loop forever (like the echo example) stop here.
        trace: Print every executed instruction (default: False)
        dump: Print registers, flags, memory and I/O after the run
            (default: True)
        breakpoints: Program slots to stop at
        input_encoding: Encoding of the runtime input text
    """

    max_steps: int = 10_000
    trace: bool = False
    dump: bool = True
    breakpoints: List[int] = field(default_factory=list)
    input_encoding: str = "utf-8"

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "RunConfig":
        """
        Create RunConfig from environment variables.

        Environment variables (all optional):
            KIJO_MAX_STEPS: Step limit (integer)
            KIJO_TRACE: "1", "true" or "yes" to enable tracing
            KIJO_INPUT_ENCODING: Input text encoding

        Returns:
            RunConfig with values from environment variables
        """
        config = cls()

        if max_steps := os.environ.get("KIJO_MAX_STEPS"):
            try:
                config.max_steps = int(max_steps)
            except ValueError:
                pass  # Keep default

        if trace := os.environ.get("KIJO_TRACE"):
            config.trace = trace.strip().lower() in ("1", "true", "yes")

        if encoding := os.environ.get("KIJO_INPUT_ENCODING"):
            config.input_encoding = encoding

        return config

    def with_overrides(
        self,
        max_steps: Optional[int] = None,
        trace: Optional[bool] = None,
        dump: Optional[bool] = None,
        breakpoints: Optional[List[int]] = None,
    ) -> "RunConfig":
        """Return a copy with every non-None argument applied."""
        changes = {
            "max_steps": max_steps,
            "trace": trace,
            "dump": dump,
            "breakpoints": list(breakpoints) if breakpoints is not None else None,
        }
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def machine_config(self) -> MachineConfig:
        return MachineConfig(input_encoding=self.input_encoding)

