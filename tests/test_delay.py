"""
Unit Tests for Delay Classification

Tests for:
- End of curriculum ("Fin") validation
- Specialty detection
- Elective expectations ({rust, java})
- Plain project expectations and index comparison
- Unknown expected projects
"""

import pytest

from progression.engines import DelayClassifier, TrackProgressResolver, TrackSelectionNormalizer
from progression.models import DelayLevel, Track

from conftest import make_entry


def states_for(catalog, entries):
    resolved = TrackProgressResolver(catalog).resolve(entries)
    states, _ = TrackSelectionNormalizer(catalog).normalize(resolved)
    return states


def finished(*projects):
    return [make_entry("jdoe", p) for p in projects]


@pytest.fixture
def completed_entries(catalog):
    """Golang, Javascript and Rust fully finished"""
    names = (
        catalog.project_names(Track.GOLANG)
        + catalog.project_names(Track.JAVASCRIPT)
        + catalog.project_names(Track.RUST)
    )
    return finished(*names)


class TestDelayClassifier:
    """Tests for DelayClassifier"""

    def test_end_validated(self, catalog, completed_entries):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, completed_entries)

        assert classifier.classify("Fin", states) == DelayLevel.VALIDATED

    def test_end_not_validated(self, catalog):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, finished("Go-reloaded"))

        assert classifier.classify("Fin", states) == DelayLevel.NOT_VALIDATED
        assert classifier.classify("fin", states) == DelayLevel.NOT_VALIDATED

    def test_completed_is_specialty_whatever_is_expected(self, catalog, completed_entries):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, completed_entries)

        for expected in ("Go-reloaded", "Graphql", "spécialité", {"rust": "RT"}, {"java": "Buy-01"}):
            assert classifier.classify(expected, states) == DelayLevel.SPECIALTY

    def test_completed_with_java_elective(self, catalog):
        names = (
            catalog.project_names(Track.GOLANG)
            + catalog.project_names(Track.JAVASCRIPT)
            + catalog.project_names(Track.JAVA)
        )
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, finished(*names))

        assert classifier.all_tracks_completed(states) is True
        assert classifier.classify("Fin", states) == DelayLevel.VALIDATED

    def test_specialty_expected(self, catalog):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, finished("Go-reloaded"))

        assert classifier.classify("spécialité", states) == DelayLevel.SPECIALTY

    def test_plain_project_on_track(self, catalog):
        classifier = DelayClassifier(catalog)
        entries = finished("Go-reloaded", "Ascii-art") + [make_entry("jdoe", "Lem-in", "working")]
        states = states_for(catalog, entries)

        assert classifier.classify("Lem-in", states) == DelayLevel.ON_TRACK
        assert classifier.classify("LEM-IN", states) == DelayLevel.ON_TRACK

    def test_plain_project_late(self, catalog):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, finished("Go-reloaded"))

        assert classifier.classify("Lem-in", states) == DelayLevel.LATE

    def test_plain_project_ahead(self, catalog):
        classifier = DelayClassifier(catalog)
        entries = finished("Go-reloaded", "Ascii-art") + [make_entry("jdoe", "Lem-in", "working")]
        states = states_for(catalog, entries)

        assert classifier.classify("Ascii-art", states) == DelayLevel.AHEAD

    def test_plain_project_in_unchosen_elective(self, catalog):
        """Expected project in Rust while the student has no Rust project"""
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, finished("Go-reloaded"))

        assert classifier.classify("RT", states) == DelayLevel.LATE

    def test_elective_on_track(self, catalog):
        classifier = DelayClassifier(catalog)
        entries = finished("Smart-road") + [make_entry("jdoe", "RT", "working")]
        states = states_for(catalog, entries)

        assert classifier.classify({"rust": "RT", "java": "Buy-01"}, states) == DelayLevel.ON_TRACK

    def test_elective_late(self, catalog):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, [make_entry("jdoe", "Smart-road", "working")])

        assert classifier.classify({"rust": "RT", "java": "Buy-01"}, states) == DelayLevel.LATE

    def test_elective_java_branch(self, catalog):
        classifier = DelayClassifier(catalog)
        entries = finished("Lets-Play") + [make_entry("jdoe", "Buy-01", "audit")]
        states = states_for(catalog, entries)

        assert classifier.classify({"rust": "RT", "java": "Lets-Play"}, states) == DelayLevel.AHEAD
        assert classifier.classify({"rust": "RT", "java": "Buy-01"}, states) == DelayLevel.ON_TRACK

    def test_elective_without_target_for_chosen_track(self, catalog):
        """Java chosen, only a Rust target configured: no comparable target"""
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, [make_entry("jdoe", "Lets-Play", "working")])

        assert states[Track.RUST].is_not_chosen
        assert classifier.classify({"rust": "RT", "java": None}, states) == DelayLevel.LATE

    def test_elective_none_chosen(self, catalog):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, finished("Go-reloaded"))

        assert classifier.classify({"rust": "RT", "java": "Buy-01"}, states) == DelayLevel.LATE

    def test_unknown_expected_project_defaults_to_on_track(self, catalog, caplog):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, finished("Go-reloaded"))

        assert classifier.classify("Piscine-Rust", states) == DelayLevel.ON_TRACK
        assert "not in the catalog" in caplog.text

    def test_unknown_expected_project_strict(self, catalog):
        classifier = DelayClassifier(catalog, strict=True)
        states = states_for(catalog, finished("Go-reloaded"))

        assert classifier.classify("Piscine-Rust", states) == DelayLevel.UNKNOWN

    def test_no_expected_config(self, catalog):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, [])

        assert classifier.classify(None, states) == DelayLevel.ON_TRACK

    def test_classification_is_idempotent(self, catalog):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, finished("Go-reloaded", "Ascii-art"))

        first = classifier.classify("Lem-in", states)
        assert all(classifier.classify("Lem-in", states) == first for _ in range(5))


class TestCompare:
    """Tests for global index comparison"""

    def test_unknown_student_project_is_late(self, catalog):
        assert DelayClassifier(catalog).compare(None, "Lem-in") == DelayLevel.LATE
        assert DelayClassifier(catalog).compare("Old-project", "Lem-in") == DelayLevel.LATE

    def test_cross_track_comparison(self, catalog):
        classifier = DelayClassifier(catalog)

        assert classifier.compare("Graphql", "Lem-in") == DelayLevel.AHEAD
        assert classifier.compare("Go-reloaded", "Graphql") == DelayLevel.LATE


class TestEmptyConfig:
    """Tests for empty expected-project configurations"""

    def test_empty_elective_config_is_late(self, catalog):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, [make_entry("jdoe", "Go-reloaded", "working")])

        assert classifier.classify({}, states) == DelayLevel.LATE

    def test_empty_elective_config_when_completed(self, catalog, completed_entries):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, completed_entries)

        assert classifier.classify({}, states) == DelayLevel.SPECIALTY

    def test_empty_string_config_is_on_track(self, catalog):
        classifier = DelayClassifier(catalog)
        states = states_for(catalog, [])

        assert classifier.classify("", states) == DelayLevel.ON_TRACK
