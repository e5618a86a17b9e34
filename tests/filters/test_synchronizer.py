import pytest

from collegedir.errors import UnknownFilterDimension
from collegedir.filters import FilterSelection, FilterSynchronizer

MEDICAL_COURSES = ["MBBS", "MD", "MS", "DM", "M.CH.", "DIPLOMA", "M.SC", "PH.D"]


def _ids(entities):
    return [entity["id"] for entity in entities]


@pytest.fixture()
def sync():
    return FilterSynchronizer()


def test_empty_selection_offers_everything(sync, colleges):
    result = sync.compute_available(colleges)

    assert _ids(result.filtered) == [1, 2, 3, 4, 5, 6, 7]
    assert result.options.streams == ["DENTAL", "DNB", "MEDICAL"]
    assert result.options.states == ["Delhi", "JAMMU & KASHMIR", "Karnataka", "Puducherry", "Tamil Nadu"]
    assert result.options.management_types == ["DNB", "Government", "PRIVATE", "Society", "Trust"]
    assert result.options.courses == []
    assert result.options.branches == []
    assert result.branch_enabled is False


def test_stream_narrows_other_dimensions(sync, colleges):
    result = sync.compute_available(colleges, {"stream": "MEDICAL"})

    assert _ids(result.filtered) == [1, 2, 3, 7]
    # A dimension's own options ignore its own selection.
    assert result.options.streams == ["DENTAL", "DNB", "MEDICAL"]
    assert result.options.states == ["Delhi", "JAMMU & KASHMIR", "Puducherry"]
    assert result.options.management_types == ["Government", "Society"]
    assert result.options.courses == MEDICAL_COURSES


def test_medical_stream_over_two_colleges():
    entities = [
        {"name": "AIIMS Delhi", "city": "New Delhi", "state": "Delhi", "college_type": "MEDICAL"},
        {"name": "JIPMER Puducherry", "city": "Puducherry", "state": "Puducherry", "college_type": "MEDICAL"},
    ]

    result = FilterSynchronizer().compute_available(entities, {"stream": "MEDICAL"})

    assert result.filtered == entities
    assert result.options.states == ["Delhi", "Puducherry"]
    assert result.options.courses == []


def test_state_selection_keeps_sibling_states(sync, colleges):
    result = sync.compute_available(colleges, {"state": "Delhi"})

    assert _ids(result.filtered) == [1]
    assert result.options.states == ["Delhi", "JAMMU & KASHMIR", "Karnataka", "Puducherry", "Tamil Nadu"]
    assert result.options.streams == ["MEDICAL"]


def test_state_spellings_filter_together(sync, colleges):
    by_ampersand = sync.compute_available(colleges, {"state": "JAMMU & KASHMIR"})
    by_and = sync.compute_available(colleges, {"state": "JAMMU AND KASHMIR"})

    assert _ids(by_ampersand.filtered) == [3, 4]
    assert _ids(by_and.filtered) == [3, 4]


def test_dental_in_jammu_and_kashmir(sync, colleges):
    result = sync.compute_available(colleges, {"stream": "DENTAL", "state": "JAMMU AND KASHMIR"})

    assert _ids(result.filtered) == [4]
    assert result.options.states == ["JAMMU & KASHMIR", "Karnataka"]
    assert result.options.courses == ["BDS", "MDS", "DIPLOMA"]


@pytest.mark.parametrize(
    "management, expected",
    [("Government", [1, 2, 3]), ("DNB", [5]), ("Trust", [4]), ("PRIVATE", [6])],
)
def test_management_filter(sync, colleges, management, expected):
    result = sync.compute_available(colleges, {"management_type": management})
    assert _ids(result.filtered) == expected


def test_course_requires_offering_stream_and_courses(sync, colleges):
    result = sync.compute_available(colleges, {"stream": "DENTAL", "course": "MDS"})

    # College 6 is DENTAL but lists no courses.
    assert _ids(result.filtered) == [4]
    assert result.branch_enabled is True
    assert result.options.branches[0] == "CONSERVATIVE DENTISTRY & ENDODONTICS"


def test_course_shared_between_streams(sync, colleges):
    result = sync.compute_available(colleges, {"stream": "MEDICAL", "course": "DIPLOMA"})

    assert result.selection.course == "DIPLOMA"
    assert _ids(result.filtered) == [1, 2, 3, 7]
    assert result.branch_enabled is False


def test_course_not_offered_by_stream_is_dropped(sync, colleges):
    result = sync.compute_available(colleges, {"stream": "MEDICAL", "course": "MDS"})

    assert result.selection.course is None
    assert _ids(result.filtered) == [1, 2, 3, 7]


def test_branch_outside_course_is_dropped(sync, colleges):
    result = sync.compute_available(
        colleges, {"stream": "MEDICAL", "course": "MBBS", "branch": "GENERAL MEDICINE"}
    )

    assert result.selection.branch is None
    assert result.branch_enabled is False
    assert result.options.branches == []


def test_branch_selection(sync, colleges):
    result = sync.compute_available(
        colleges, {"stream": "MEDICAL", "course": "MD", "branch": "GENERAL MEDICINE"}
    )

    assert result.selection.branch == "GENERAL MEDICINE"
    assert result.branch_enabled is True
    assert "GENERAL MEDICINE" in result.options.branches
    assert _ids(result.filtered) == [1, 2, 3, 7]


def test_query_restricts_pool(sync, colleges):
    result = sync.compute_available(colleges, {}, query="delhi")

    assert _ids(result.filtered) == [1]
    assert result.options.states == ["Delhi"]


def test_filter_shortcut(sync, colleges):
    selection = FilterSelection(stream="DNB")
    assert _ids(sync.filter(colleges, selection)) == [5]


def test_stream_change_clears_course_and_branch():
    selection = FilterSelection(stream="MEDICAL", state="Delhi", course="MD", branch="GENERAL MEDICINE")

    changed = selection.with_change("stream", "DENTAL")

    assert changed == FilterSelection(stream="DENTAL", state="Delhi")


def test_course_change_clears_branch_only():
    selection = FilterSelection(stream="MEDICAL", course="MD", branch="GENERAL MEDICINE")

    changed = selection.with_change("course", "MS")

    assert changed == FilterSelection(stream="MEDICAL", course="MS")


def test_other_changes_keep_dependent_values():
    selection = FilterSelection(stream="MEDICAL", course="MD", branch="GENERAL MEDICINE")

    changed = selection.with_change("state", "Delhi")

    assert changed.course == "MD"
    assert changed.branch == "GENERAL MEDICINE"


def test_blank_values_clear_a_dimension():
    selection = FilterSelection.from_mapping({"stream": "  ", "state": "Delhi"})
    assert selection == FilterSelection(state="Delhi")
    assert selection.with_change("state", "").state is None


def test_unknown_dimension_is_rejected(sync, colleges):
    with pytest.raises(UnknownFilterDimension) as excinfo:
        FilterSelection().with_change("city", "Delhi")
    assert excinfo.value.dimension == "city"

    with pytest.raises(UnknownFilterDimension):
        sync.compute_available(colleges, {"college": "AIIMS"})


def test_raw_government_spelling_is_never_offered():
    entities = [
        {"id": 1, "name": "XYZ Institute of Medical Sciences", "college_type": "MEDICAL", "management_type": "GOVERNMENT"},
        {"id": 2, "name": "Apollo Hospitals", "college_type": "DNB", "management_type": "GOVERNMENT"},
    ]
    sync = FilterSynchronizer()

    assert sync.compute_available(entities).options.management_types == ["DNB"]
    for value in ("GOVERNMENT", "Government"):
        assert sync.compute_available(entities, {"management_type": value}).filtered == []
