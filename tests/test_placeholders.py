#!/usr/bin/env python3
"""
ABOUTME: Tests for placeholder injection into empty table cells
"""

from _template_fill_helpers import br_run, cell, para, row, run, table, wrap_body

from docx_structure.common import PLACEHOLDER_TEXT_XML  # noqa: E402
from docx_structure.extractor import extract_structured_segments  # noqa: E402
from docx_structure.placeholders import inject_placeholders_for_empty_cells  # noqa: E402

RPR = '<w:rPr><w:b/><w:sz w:val="20"/></w:rPr>'


class TestInjectPlaceholders:
    """Tests for inject_placeholders_for_empty_cells"""

    def test_br_run_becomes_text_run(self):
        """The <w:br/> of a text-less cell is replaced, run properties kept"""
        xml = wrap_body(table(row(cell(para(br_run(RPR))))))
        result = inject_placeholders_for_empty_cells(xml)
        assert f'<w:r>{RPR}{PLACEHOLDER_TEXT_XML}</w:r>' in result
        assert '<w:br/>' not in result

    def test_one_placeholder_per_cell(self):
        """Only the first qualifying run of a cell is changed"""
        xml = wrap_body(table(row(cell(para(br_run(RPR)), para(br_run(RPR))))))
        result = inject_placeholders_for_empty_cells(xml)
        assert result.count(PLACEHOLDER_TEXT_XML) == 1
        assert result.count('<w:br/>') == 1

    def test_each_qualifying_cell_gets_one(self):
        xml = wrap_body(table(row(cell(para(br_run())), cell(para(br_run())))))
        result = inject_placeholders_for_empty_cells(xml)
        assert result.count(PLACEHOLDER_TEXT_XML) == 2

    def test_cell_with_text_untouched(self):
        xml = wrap_body(table(row(cell(para(run('Name'), br_run())))))
        assert inject_placeholders_for_empty_cells(xml) == xml

    def test_cell_without_br_untouched(self):
        xml = wrap_body(table(row(cell('<w:p/>'))))
        assert inject_placeholders_for_empty_cells(xml) == xml

    def test_pict_run_untouched(self):
        """Decorative runs holding <w:pict> are not placeholders"""
        pict_run = '<w:r><w:pict><v:rect xmlns:v="urn:schemas-microsoft-com:vml"/></w:pict><w:br/></w:r>'
        xml = wrap_body(table(row(cell(para(pict_run)))))
        assert inject_placeholders_for_empty_cells(xml) == xml

    def test_pict_run_skipped_for_later_run(self):
        """A later plain break run in the same cell still qualifies"""
        pict_run = '<w:r><w:pict/><w:br/></w:r>'
        xml = wrap_body(table(row(cell(para(pict_run, br_run(RPR))))))
        result = inject_placeholders_for_empty_cells(xml)
        assert pict_run in result
        assert f'<w:r>{RPR}{PLACEHOLDER_TEXT_XML}</w:r>' in result

    def test_typed_break_is_not_placeholder(self):
        """Page breaks carry a type attribute and are left alone"""
        xml = wrap_body(table(row(cell(para('<w:r><w:br w:type="page"/></w:r>')))))
        assert inject_placeholders_for_empty_cells(xml) == xml

    def test_body_breaks_untouched(self):
        """Only table cells are processed"""
        xml = wrap_body(para(br_run()))
        assert inject_placeholders_for_empty_cells(xml) == xml

    def test_placeholder_becomes_segment(self):
        """Extraction sees the injected run as a fillable cell segment"""
        xml = wrap_body(table(row(cell(para(run('Omschrijving'))), cell(para(br_run())))))
        result = extract_structured_segments(xml)

        assert result.processed_xml != xml
        assert [seg.text for seg in result.segments] == ['Omschrijving', ' ']
        assert result.tables[0].rows[0].cells[1].segment_ids == ['s1']
        assert '[s1] "(placeholder - fill with content)"' in result.template_map
