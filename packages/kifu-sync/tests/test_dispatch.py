import pytest

from kifu_sync.dispatch import DispatchResult, DispatchState, feed_line

URL = "https://api.github.com/repos/o-jill/ruversi/actions/artifacts/42/zip"


def name_line(name: str) -> str:
    return f'  "name": "{name}",\n'


def url_line(url: str = URL) -> str:
    return f'  "archive_download_url": "{url}",\n'


def fresh(size: int = 100, remaining: int = 200) -> DispatchState:
    return DispatchState.initial(dedup_size=size, remaining=remaining)


def test_name_line_sets_pending_and_marks_index():
    outcome = feed_line(fresh(), name_line("kifu-N9_20220720154803"))
    assert outcome.state.pending == "kifu-N9_20220720154803.zip"
    assert outcome.state.seen[9] is True
    assert outcome.download is None


def test_url_line_emits_download_and_clears_pending():
    state = feed_line(fresh(), name_line("kifu-N9_x")).state
    outcome = feed_line(state, url_line())
    assert outcome.download is not None
    assert outcome.download.filename == "kifu-N9_x.zip"
    assert outcome.download.url == URL
    assert outcome.state.pending is None
    assert outcome.state.remaining == 199


def test_url_line_without_pending_is_ignored():
    state = fresh()
    outcome = feed_line(state, url_line())
    assert outcome.download is None
    assert outcome.state == state


def test_name_without_index_discards_candidate():
    state = feed_line(fresh(), name_line("kifu-N1_a")).state
    outcome = feed_line(state, name_line("kifu-latest"))
    assert outcome.state.pending is None
    assert feed_line(outcome.state, url_line()).download is None


@pytest.mark.parametrize("idx", [100, 101, 999])
def test_out_of_range_index_is_discarded(idx):
    state = feed_line(fresh(), name_line("kifu-N3_a")).state
    outcome = feed_line(state, name_line(f"kifu-N{idx}_a"))
    assert outcome.state.pending is None
    assert outcome.warning == f"ERROR: idx:{idx} >= 100"
    assert outcome.state.seen == state.seen


def test_duplicate_index_only_first_downloads():
    lines = [
        name_line("kifu-N5_first"),
        url_line(),
        name_line("kifu-N5_second"),
        url_line(),
    ]
    state = fresh()
    downloads = []
    for line in lines:
        outcome = feed_line(state, line)
        state = outcome.state
        if outcome.download:
            downloads.append(outcome.download.filename)
    assert downloads == ["kifu-N5_first.zip"]


def test_other_lines_leave_state_untouched():
    state = feed_line(fresh(), name_line("kifu-N2_a")).state
    outcome = feed_line(state, '  "size_in_bytes": 12345,\n')
    assert outcome.state == state


def test_dispatch_result_holds_only_counters():
    assert DispatchResult() == DispatchResult(downloads=0, unzipped=0)
    assert vars(DispatchResult(downloads=2, unzipped=1)) == {"downloads": 2, "unzipped": 1}
