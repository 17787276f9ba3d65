import pyfs_utils
import pytest
from pyfs_utils.counters import LONG_MAX, Counter


@pytest.mark.parametrize("factory", [pyfs_utils.LongCounter, pyfs_utils.BigIntCounter])
def test_counter_basics(factory):
    c = factory()
    assert c.get() == 0
    c.increment()
    c.add(41)
    assert c.get() == 42
    c.reset()
    assert c.get() == 0


def test_long_counter_overflow():
    c = pyfs_utils.LongCounter()
    c.add(LONG_MAX)
    with pytest.raises(OverflowError):
        c.increment()
    assert c.get() == LONG_MAX


def test_big_int_counter_grows_past_64_bits():
    c = pyfs_utils.BigIntCounter()
    c.add(LONG_MAX)
    c.add(LONG_MAX)
    assert c.get() == 2 * LONG_MAX


def test_noop_counter_ignores_updates():
    c = pyfs_utils.NoopCounter()
    c.add(100)
    c.increment()
    assert c.get() == 0


def test_counters_compare_by_value():
    a = pyfs_utils.LongCounter()
    b = pyfs_utils.BigIntCounter()
    a.add(7)
    b.add(7)
    assert a == b
    b.increment()
    assert a != b


def test_counters_satisfy_protocol():
    for c in (pyfs_utils.LongCounter(), pyfs_utils.BigIntCounter(), pyfs_utils.NoopCounter()):
        assert isinstance(c, Counter)


def test_path_counters_defaults():
    counters = pyfs_utils.PathCounters()
    assert isinstance(counters.byte_counter, pyfs_utils.BigIntCounter)
    assert isinstance(counters.file_counter, pyfs_utils.LongCounter)
    assert isinstance(counters.directory_counter, pyfs_utils.LongCounter)


def test_path_counters_reset_and_repr():
    counters = pyfs_utils.long_path_counters()
    counters.file_counter.add(3)
    counters.directory_counter.add(2)
    counters.byte_counter.add(10)
    assert repr(counters) == "PathCounters(files=3, directories=2, bytes=10)"
    counters.reset()
    assert repr(counters) == "PathCounters(files=0, directories=0, bytes=0)"


def test_path_counters_equality():
    a = pyfs_utils.long_path_counters()
    b = pyfs_utils.big_int_path_counters()
    a.file_counter.increment()
    b.file_counter.increment()
    assert a == b
