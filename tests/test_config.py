from types import SimpleNamespace
from unittest.mock import patch

from znippy.config import StrategicConfig, get_config, strategic_config
from znippy.int_ring import MINI_SIZE

BLOCK = 10 * 1024 * 1024


def _cpu_count(physical, logical):
    def fake(logical_arg=True, **kwargs):
        is_logical = kwargs.get("logical", logical_arg)
        return logical if is_logical else physical

    return fake


def _build(physical, logical, total):
    with patch("psutil.cpu_count", side_effect=_cpu_count(physical, logical)), patch(
        "psutil.virtual_memory", return_value=SimpleNamespace(total=total)
    ):
        return strategic_config()


def test_fixed_values_from_source():
    config = _build(8, 16, 64 * BLOCK)
    assert config.compression_level == 19
    assert config.file_split_block_size == 10 * 1024 * 1024
    assert config.zstd_output_buffer_size == 1 * 1024 * 1024
    assert config.min_free_memory_ratio == 0.0


def test_cores_are_split_between_stages():
    config = _build(12, 24, 64 * BLOCK)
    assert config.max_core_in_flight + config.max_core_in_compress == 12
    assert config.max_core_in_flight >= config.max_core_in_compress


def test_falls_back_to_logical_cores():
    config = _build(None, 6, 64 * BLOCK)
    assert config.max_core_in_flight + config.max_core_in_compress == 6


def test_memory_budget_uses_all_memory():
    total = 123 * BLOCK + 17
    config = _build(4, 4, total)
    assert config.max_mem_allowed == total


def test_max_chunks_capped_by_ring_size():
    config = _build(4, 4, 10_000 * BLOCK)
    assert config.max_chunks == MINI_SIZE


def test_max_chunks_limited_by_memory():
    config = _build(4, 4, 3 * BLOCK + 5)
    assert config.max_chunks == 3


def test_get_config_is_cached():
    first = get_config()
    assert isinstance(first, StrategicConfig) and first is get_config()
    assert 0 <= first.max_chunks <= MINI_SIZE