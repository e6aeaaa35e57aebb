#!/usr/bin/env python3
"""
ABOUTME: Tests for blueprint and profile count parsing
"""

import _template_fill_helpers  # noqa: F401  # sets sys.path

import pytest  # noqa: E402

from docx_structure.blueprint import ProfileCounts, TemplateBlueprint  # noqa: E402


BLUEPRINT_JSON = {
    'sections': [
        {'type': 'personal_info', 'label': 'Personalia', 'segmentIds': ['s0', 's1']},
        {'type': 'work_experience', 'label': 'Werkervaring', 'segmentIds': ['s2', 's3', 's4']},
    ],
    'repeatingBlocks': [
        {
            'sectionType': 'work_experience',
            'blockType': 'table_rows',
            'instances': [{'segmentIds': ['s3']}, {'segmentIds': ['s4']}],
        },
    ],
}


class TestTemplateBlueprint:
    """Tests for TemplateBlueprint.from_dict"""

    def test_parses_sections_and_blocks(self):
        blueprint = TemplateBlueprint.from_dict(BLUEPRINT_JSON)

        assert [s.type for s in blueprint.sections] == ['personal_info', 'work_experience']
        assert blueprint.sections[1].label == 'Werkervaring'
        block = blueprint.repeating_blocks[0]
        assert block.section_type == 'work_experience'
        assert block.block_type == 'table_rows'
        assert [inst.segment_ids for inst in block.instances] == [['s3'], ['s4']]

    def test_missing_sections_default_empty(self):
        blueprint = TemplateBlueprint.from_dict({'repeatingBlocks': []})
        assert blueprint.sections == []
        assert blueprint.repeating_blocks == []

    def test_unknown_block_type(self):
        data = {'repeatingBlocks': [{'sectionType': 'education', 'blockType': 'columns', 'instances': []}]}
        with pytest.raises(ValueError, match='blockType'):
            TemplateBlueprint.from_dict(data)

    def test_unknown_repeating_section_type(self):
        data = {'repeatingBlocks': [{'sectionType': 'hobbies', 'blockType': 'table_rows', 'instances': []}]}
        with pytest.raises(ValueError, match='sectionType'):
            TemplateBlueprint.from_dict(data)

    def test_unknown_section_type(self):
        with pytest.raises(ValueError, match='sections\\[0\\]'):
            TemplateBlueprint.from_dict({'sections': [{'type': 'photo', 'label': '', 'segmentIds': []}]})

    def test_non_list_rejected(self):
        with pytest.raises(ValueError, match='must be a list'):
            TemplateBlueprint.from_dict({'repeatingBlocks': {}})

    def test_non_object_rejected(self):
        with pytest.raises(ValueError):
            TemplateBlueprint.from_dict(['not', 'an', 'object'])
        with pytest.raises(ValueError, match='instances\\[0\\]'):
            TemplateBlueprint.from_dict({'repeatingBlocks': [
                {'sectionType': 'education', 'blockType': 'table_rows', 'instances': ['s1']},
            ]})

    def test_segment_ids_must_be_strings(self):
        with pytest.raises(ValueError, match='segmentIds'):
            TemplateBlueprint.from_dict({'repeatingBlocks': [
                {'sectionType': 'education', 'blockType': 'table_rows', 'instances': [{'segmentIds': [1]}]},
            ]})


class TestProfileCounts:
    """Tests for ProfileCounts"""

    def test_from_dict(self):
        counts = ProfileCounts.from_dict({'workExperience': 4, 'education': 2})
        assert counts.target_for('work_experience') == 4
        assert counts.target_for('education') == 2
        assert counts.target_for('languages') == 0

    def test_untracked_section_is_zero(self):
        assert ProfileCounts(work_experience=3).target_for('hobbies') == 0

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            ProfileCounts(education=-1)
