"""Runtime tuning derived from the machine's cores and memory."""

from __future__ import annotations

import functools
import logging
import math
from dataclasses import dataclass

import psutil

from .int_ring import MINI_SIZE

_log = logging.getLogger(__name__)

COMPRESSION_LEVEL = 19
FILE_SPLIT_BLOCK_SIZE = 10 * 1024 * 1024
ZSTD_OUTPUT_BUFFER_SIZE = 1 * 1024 * 1024
MIN_FREE_MEMORY_RATIO = 0.0
_FLIGHT_SHARE = 0.90


@dataclass(frozen=True)
class StrategicConfig:
    """Thread counts, memory budget and block sizes for the pipeline."""

    max_core_in_flight: int
    max_core_in_compress: int
    max_mem_allowed: int
    min_free_memory_ratio: float
    file_split_block_size: int
    max_chunks: int
    compression_level: int
    zstd_output_buffer_size: int


def _physical_cores() -> int:
    return psutil.cpu_count(logical=False) or psutil.cpu_count() or 1


def _log_config(config: StrategicConfig) -> None:
    _log.info("[strategic_config] max_core_in_flight: %d", config.max_core_in_flight)
    _log.info("[strategic_config] max_core_in_compress: %d", config.max_core_in_compress)
    _log.info(
        "[strategic_config] min_free_memory_ratio: %.0f%%",
        config.min_free_memory_ratio * 100.0,
    )
    _log.info("[strategic_config] compression_level: %d", config.compression_level)
    _log.info("[strategic_config] max_chunks: %d", config.max_chunks)
    _log.info(
        "[strategic_config] zstd_output_buffer_size: %d", config.zstd_output_buffer_size
    )


def strategic_config() -> StrategicConfig:
    """Build a configuration from the current machine."""
    total_memory = psutil.virtual_memory().total
    cores = _physical_cores()

    max_core_in_flight = math.ceil(cores * _FLIGHT_SHARE)
    max_core_in_compress = max(cores - max_core_in_flight, 0)
    max_mem_allowed = int(total_memory * (1.0 - MIN_FREE_MEMORY_RATIO))
    max_chunks = min(max_mem_allowed // FILE_SPLIT_BLOCK_SIZE, MINI_SIZE)

    _log.info(
        "[strategic_config] detected %d cores and %d MiB memory",
        cores,
        total_memory // (1024 * 1024),
    )
    config = StrategicConfig(
        max_core_in_flight=max_core_in_flight,
        max_core_in_compress=max_core_in_compress,
        max_mem_allowed=max_mem_allowed,
        min_free_memory_ratio=MIN_FREE_MEMORY_RATIO,
        file_split_block_size=FILE_SPLIT_BLOCK_SIZE,
        max_chunks=max_chunks,
        compression_level=COMPRESSION_LEVEL,
        zstd_output_buffer_size=ZSTD_OUTPUT_BUFFER_SIZE,
    )
    _log_config(config)
    return config


@functools.lru_cache(maxsize=None)
def get_config() -> StrategicConfig:
    """Return the process-wide configuration, computed once."""
    return strategic_config()