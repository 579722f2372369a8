"""End-to-end validation of edit proposals (stub measurer: 10pt per char)."""

from layout_editor.services.edit_pipeline import summarize, validate_edits
from layout_editor.services.layout_models import (
    EditProposal,
    LayoutIssue,
    TruncationReason,
)


class TestValidateEdits:

    def test_fitting_edit_passes_through(self, make_element, make_document, measurer):
        el = make_element("0_0", width=100, height=20, content="Hello")
        result = validate_edits(make_document(el), [EditProposal("0_0", "Howdy")], measurer)

        edit = result.validated_edits[0]
        assert edit.final_text == "Howdy"
        assert edit.original_text == "Hello"
        assert edit.truncated is False
        assert edit.truncation_reason == TruncationReason.NONE
        assert edit.fits_width and edit.fits_height
        assert edit.has_overlap is False
        assert edit.issues == ()
        assert measurer.measure(edit.final_text, el.font) <= el.bbox.width - 4

    def test_overflowing_edit_is_truncated(self, make_element, make_document, measurer):
        el = make_element("0_0", width=100, height=20, font_size=12, content="Hello")
        result = validate_edits(make_document(el), [EditProposal("0_0", "Hello World")], measurer)

        edit = result.validated_edits[0]
        assert edit.fits_width is False
        assert edit.truncated is True
        assert edit.truncation_reason == TruncationReason.WIDTH
        assert edit.final_text == "Hello ..."
        assert edit.original_length == 11
        assert edit.truncated_length == 9
        assert edit.fit.exceeds_by["width"] == 14

    def test_height_overflow_reason(self, make_element, make_document, measurer):
        el = make_element("0_0", width=200, height=10, font_size=12, content="Hi")
        result = validate_edits(make_document(el), [EditProposal("0_0", "Hey")], measurer)
        edit = result.validated_edits[0]
        assert edit.truncated is True
        assert edit.truncation_reason == TruncationReason.HEIGHT

    def test_multiline_edit_keeps_box_lines(self, make_element, make_document, measurer):
        el = make_element("0_0", width=200, height=26, font_size=10, content="a\nb")
        proposal = EditProposal("0_0", "line one\nline two\nline three\nline four")
        edit = validate_edits(make_document(el), [proposal], measurer).validated_edits[0]
        assert edit.truncation_reason == TruncationReason.HEIGHT
        assert edit.final_text.split("\n") == ["line one", "line ..."]

    def test_dangling_reference_passes_through(self, make_element, make_document, measurer):
        el = make_element("0_0")
        result = validate_edits(make_document(el), [EditProposal("9_9", "Ghost text")], measurer)

        edit = result.validated_edits[0]
        assert edit.element_id == "9_9"
        assert edit.final_text == "Ghost text"
        assert edit.original_text is None
        assert edit.issues == (LayoutIssue.DANGLING_ELEMENT_REFERENCE,)

    def test_missing_measurer_fails_open(self, make_element, make_document):
        el = make_element("0_0", width=50, height=20)
        result = validate_edits(make_document(el), [EditProposal("0_0", "x" * 100)], None)

        edit = result.validated_edits[0]
        assert edit.final_text == "x" * 100
        assert edit.truncated is False
        assert edit.fit.confidence == 1.0
        assert LayoutIssue.MEASUREMENT_UNAVAILABLE in edit.issues

    def test_malformed_box_accepted_and_flagged(self, make_element, make_document, measurer):
        el = make_element("0_0", width=-5, height=20)
        result = validate_edits(make_document(el), [EditProposal("0_0", "Anything")], measurer)

        edit = result.validated_edits[0]
        assert edit.final_text == "Anything"
        assert edit.truncated is False
        assert edit.has_overlap is False
        assert LayoutIssue.MALFORMED_BOUNDING_BOX in edit.issues

    def test_box_past_page_edge_flagged(self, make_element, make_document, measurer):
        el = make_element("0_0", x=250, y=10, width=100, height=20)
        result = validate_edits(make_document(el, width=300, height=400), [EditProposal("0_0", "Hi")], measurer)

        edit = result.validated_edits[0]
        assert edit.final_text == "Hi"
        assert edit.truncated is False
        assert edit.issues == (LayoutIssue.BOX_OUTSIDE_PAGE,)

    def test_box_inside_page_not_flagged(self, make_element, make_document, measurer):
        el = make_element("0_0", x=200, y=380, width=100, height=20)
        result = validate_edits(make_document(el, width=300, height=400), [EditProposal("0_0", "Hi")], measurer)
        assert result.validated_edits[0].issues == ()

    def test_duplicate_proposals_keep_last(self, make_element, make_document, measurer):
        el = make_element("0_0", width=100, height=20)
        result = validate_edits(
            make_document(el),
            [EditProposal("0_0", "first"), EditProposal("0_0", "second")],
            measurer,
        )
        assert len(result.validated_edits) == 1
        assert result.validated_edits[0].final_text == "second"

    def test_exhausted_truncation_flagged(self, make_element, make_document, measurer):
        el = make_element("0_0", width=20, height=20)
        edit = validate_edits(make_document(el), [EditProposal("0_0", "Hello")], measurer).validated_edits[0]
        assert edit.final_text == "H"
        assert LayoutIssue.TRUNCATION_EXHAUSTED in edit.issues

    def test_source_elements_untouched(self, make_element, make_document, measurer):
        el = make_element("0_0", width=100, height=20, content="Hello")
        doc = make_document(el)
        validate_edits(doc, [EditProposal("0_0", "Hello World")], measurer)
        assert doc.pages[0].elements[0] is el
        assert el.content == "Hello"


class TestOverlapInPipeline:

    def test_colliding_edit_narrowed_and_reported(self, make_element, make_document, measurer):
        a = make_element("0_0", x=0, y=0, width=100, height=20, content="A")
        b = make_element("0_1", x=50, y=0, width=100, height=20, content="B")
        result = validate_edits(
            make_document(a, b),
            [EditProposal("0_1", "Hello World"), EditProposal("0_0", "Hi")],
            measurer,
        )
        by_id = {e.element_id: e for e in result.validated_edits}

        assert [e.element_id for e in result.validated_edits] == ["0_1", "0_0"]
        assert by_id["0_0"].final_text == "Hi"
        assert by_id["0_0"].has_overlap is False

        eb = by_id["0_1"]
        assert eb.truncated is True
        assert eb.truncated_for_overlap is True
        assert eb.final_text == "H..."
        assert eb.has_overlap is True
        assert LayoutIssue.UNRESOLVED_OVERLAP in eb.issues

    def test_unedited_neighbours_are_not_obstacles(self, make_element, make_document, measurer):
        a = make_element("0_0", x=0, y=0, width=100, height=20, content="A")
        b = make_element("0_1", x=50, y=0, width=100, height=20, content="B")
        edit = validate_edits(
            make_document(a, b), [EditProposal("0_1", "Short")], measurer,
        ).validated_edits[0]
        assert edit.has_overlap is False
        assert edit.final_text == "Short"


class TestSummary:

    def test_summary_stats(self, make_element, make_document, measurer):
        a = make_element("0_0", x=0, y=0, width=100, height=20, content="Same")
        b = make_element("0_1", x=0, y=100, width=100, height=20, content="Old")
        c = make_element("0_2", x=0, y=200, width=100, height=20, content="Short")
        result = validate_edits(
            make_document(a, b, c),
            [
                EditProposal("0_0", "Same"),
                EditProposal("0_1", "New"),
                EditProposal("0_2", "Much longer than the box"),
            ],
            measurer,
        )
        stats = result.summary_stats
        assert stats.total == 3
        assert stats.edited == 2
        assert stats.truncated == 1

    def test_summarize_empty(self):
        stats = summarize([])
        assert (stats.total, stats.edited, stats.truncated) == (0, 0, 0)

    def test_dangling_edit_counts_as_edited(self, make_element, make_document, measurer):
        el = make_element("0_0", content="Same")
        result = validate_edits(
            make_document(el),
            [EditProposal("0_0", "Same"), EditProposal("4_4", "Ghost")],
            measurer,
        )
        by_id = {e.element_id: e for e in result.validated_edits}
        assert by_id["0_0"].changed is False
        assert by_id["4_4"].changed is True
        assert result.summary_stats.edited == 1
