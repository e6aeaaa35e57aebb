#!/usr/bin/env python3
"""
ABOUTME: Tests for applying segment fills back into document XML
"""

from _template_fill_helpers import cell, is_well_formed, para, row, run, tab_run, table, textbox_run, wrap_body

import pytest  # noqa: E402

from docx_structure.extractor import extract_structured_segments  # noqa: E402
from docx_structure.fill import apply_structured_fills, build_text_element, expand_fills  # noqa: E402


def _fill(xml: str, fills: dict) -> str:
    result = extract_structured_segments(xml)
    return apply_structured_fills(result.processed_xml, fills, result.segments, result.merge_groups)


def _texts(xml: str) -> list:
    return [seg.text for seg in extract_structured_segments(xml).segments]


class TestApplyStructuredFills:
    """Tests for apply_structured_fills"""

    def test_empty_fills_is_noop(self):
        xml = wrap_body(para(run('Jan'), run('Jansen')) + table(row(cell(para(run('x'))))))
        result = extract_structured_segments(xml)
        assert apply_structured_fills(result.processed_xml, {}, result.segments, result.merge_groups) == xml

    def test_naam_scenario(self):
        """Filling the empty text of the second paragraph"""
        xml = '<w:p><w:r><w:t>Naam :</w:t></w:r></w:p><w:p><w:r><w:t></w:t></w:r></w:p>'
        filled = _fill(xml, {'s1': 'Jan Jansen'})
        assert filled == (
            '<w:p><w:r><w:t>Naam :</w:t></w:r></w:p>'
            '<w:p><w:r><w:t xml:space="preserve">Jan Jansen</w:t></w:r></w:p>'
        )

    def test_leader_fill_empties_followers(self):
        xml = wrap_body(para(run('20'), run('20'), run('-'), run('2025')))
        filled = _fill(xml, {'s0': '2018 - 2022'})
        assert _texts(filled) == ['2018 - 2022', '', '', '']

    def test_explicit_follower_fill_kept(self):
        xml = wrap_body(para(run('Jan'), run('Jansen')))
        filled = _fill(xml, {'s0': 'Piet', 's1': ' de Vries'})
        assert _texts(filled) == ['Piet', ' de Vries']

    def test_follower_untouched_without_leader(self):
        xml = wrap_body(para(run('Jan'), run('Jansen')))
        filled = _fill(xml, {'s1': 'X'})
        assert _texts(filled) == ['Jan', 'X']

    def test_tab_sub_groups_filled_independently(self):
        xml = wrap_body(para(run('Email'), run(':'), tab_run(), run('old'), run('@mail')))
        filled = _fill(xml, {'s2': 'jan@example.com'})
        assert _texts(filled) == ['Email', ':', 'jan@example.com', '']

    def test_special_characters_escaped(self):
        value = 'R&D <lead> "quoted" \'single\''
        xml = wrap_body(para(run('old')))
        filled = _fill(xml, {'s0': value})
        assert '<w:t xml:space="preserve">R&amp;D &lt;lead&gt; &quot;quoted&quot; &#x27;single&#x27;</w:t>' in filled
        assert _texts(filled) == [value]
        assert is_well_formed(filled)

    def test_control_characters_removed(self):
        xml = wrap_body(para(run('old')))
        filled = _fill(xml, {'s0': 'bad\x00\x0bvalue'})
        assert _texts(filled) == ['badvalue']
        assert is_well_formed(filled)

    def test_textbox_fill_leaves_outer_runs(self):
        """A run after a textbox is not a follower of the textbox text"""
        xml = wrap_body(para(run('Outer1'), textbox_run(para(run('Inner'))), run('Outer2')))
        filled = _fill(xml, {'s1': 'Filled'})
        assert _texts(filled) == ['Outer1', 'Filled', 'Outer2']
        assert is_well_formed(filled)

    def test_unknown_id_skipped(self):
        xml = wrap_body(para(run('A')) + para(run('B')))
        filled = _fill(xml, {'s99': 'nope', 's1': 'C'})
        assert _texts(filled) == ['A', 'C']

    def test_offsets_survive_length_changes(self):
        xml = wrap_body(para(run('one')) + para(run('two')) + para(run('three')))
        filled = _fill(xml, {'s0': 'a much longer first value', 's1': '', 's2': '3'})
        assert _texts(filled) == ['a much longer first value', '', '3']

    def test_table_cell_fill(self):
        xml = wrap_body(table(row(cell(para(run('Period'))), cell(para(run('Employer'))))))
        filled = _fill(xml, {'s1': 'Acme B.V.'})
        result = extract_structured_segments(filled)
        assert result.tables[0].rows[0].cells[1].text == 'Acme B.V.'
        assert is_well_formed(filled)

    def test_none_value_treated_as_empty(self):
        xml = wrap_body(para(run('x')))
        assert _texts(_fill(xml, {'s0': None})) == ['']

    def test_document_must_be_string(self):
        with pytest.raises(TypeError):
            apply_structured_fills(None, {}, [])


class TestBuildTextElement:
    """Tests for build_text_element"""

    def test_adds_preserve(self):
        assert build_text_element('<w:t>Old</w:t>', 'New') == '<w:t xml:space="preserve">New</w:t>'

    def test_keeps_existing_preserve(self):
        original = '<w:t xml:space="preserve">Old </w:t>'
        assert build_text_element(original, ' New') == '<w:t xml:space="preserve"> New</w:t>'

    def test_keeps_other_attributes(self):
        original = '<w:t w14:foo="1">Old</w:t>'
        assert build_text_element(original, 'New') == '<w:t xml:space="preserve" w14:foo="1">New</w:t>'


class TestExpandFills:
    """Tests for expand_fills"""

    def test_followers_added(self):
        assert expand_fills({'s0': 'x'}, {'s0': ['s1', 's2']}) == {'s0': 'x', 's1': '', 's2': ''}

    def test_explicit_follower_wins(self):
        assert expand_fills({'s0': 'x', 's2': 'y'}, {'s0': ['s1', 's2']}) == {'s0': 'x', 's1': '', 's2': 'y'}

    def test_input_not_mutated(self):
        fills = {'s0': 'x'}
        expand_fills(fills, {'s0': ['s1']})
        assert fills == {'s0': 'x'}

    def test_no_merge_groups(self):
        assert expand_fills({'s3': 'x'}) == {'s3': 'x'}
