"""
ABOUTME: Template blueprint and profile count data model
ABOUTME: Parses the camelCase JSON produced by the template analysis step
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

SECTION_TYPES = (
    'personal_info',
    'work_experience',
    'education',
    'skills',
    'languages',
    'references',
    'hobbies',
    'special_notes',
    'profile_summary',
    'other',
)

REPEATING_SECTION_TYPES = ('work_experience', 'education', 'languages', 'skills')

BLOCK_TABLE_ROWS = 'table_rows'
BLOCK_PARAGRAPH_GROUP = 'paragraph_group'
BLOCK_TYPES = (BLOCK_TABLE_ROWS, BLOCK_PARAGRAPH_GROUP)


def _require_list(data: Mapping[str, Any], key: str, where: str) -> list:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"{where}.{key} must be a list, got {type(value).__name__}")
    return value


def _require_mapping(value: Any, where: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ValueError(f"{where} must be an object, got {type(value).__name__}")
    return value


def _segment_ids(data: Mapping[str, Any], where: str) -> List[str]:
    ids = _require_list(data, 'segmentIds', where)
    if not all(isinstance(sid, str) for sid in ids):
        raise ValueError(f"{where}.segmentIds must contain strings")
    return list(ids)


@dataclass
class BlueprintSection:
    type: str
    label: str
    segment_ids: List[str] = field(default_factory=list)


@dataclass
class BlockInstance:
    """Segment IDs making up one repetition of a block"""
    segment_ids: List[str] = field(default_factory=list)


@dataclass
class RepeatingBlock:
    section_type: str            # work_experience | education | languages | skills
    block_type: str              # table_rows | paragraph_group
    instances: List[BlockInstance] = field(default_factory=list)


@dataclass
class TemplateBlueprint:
    """Sections and repeating blocks identified in a template"""
    sections: List[BlueprintSection] = field(default_factory=list)
    repeating_blocks: List[RepeatingBlock] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TemplateBlueprint':
        """
        Build a blueprint from analysis JSON.

        Expected shape:
            {
              "sections": [{"type": "education", "label": "Opleidingen", "segmentIds": ["s4"]}],
              "repeatingBlocks": [{
                "sectionType": "work_experience",
                "blockType": "table_rows",
                "instances": [{"segmentIds": ["s5", "s6"]}]
              }]
            }

        Raises:
            ValueError: On a wrong shape or an unknown section/block type
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Blueprint must be an object, got {type(data).__name__}")

        sections = []
        for i, raw in enumerate(_require_list(data, 'sections', 'blueprint')):
            where = f'sections[{i}]'
            raw = _require_mapping(raw, where)
            section_type = raw.get('type')
            if section_type not in SECTION_TYPES:
                raise ValueError(f"{where}.type: unknown section type {section_type!r}")
            sections.append(BlueprintSection(
                type=section_type,
                label=str(raw.get('label', '')),
                segment_ids=_segment_ids(raw, where),
            ))

        blocks = []
        for i, raw in enumerate(_require_list(data, 'repeatingBlocks', 'blueprint')):
            where = f'repeatingBlocks[{i}]'
            raw = _require_mapping(raw, where)
            section_type = raw.get('sectionType')
            if section_type not in REPEATING_SECTION_TYPES:
                raise ValueError(f"{where}.sectionType: unknown section type {section_type!r}")
            block_type = raw.get('blockType')
            if block_type not in BLOCK_TYPES:
                raise ValueError(f"{where}.blockType: unknown block type {block_type!r}")
            instances = [
                BlockInstance(segment_ids=_segment_ids(
                    _require_mapping(inst, f"{where}.instances[{j}]"), f"{where}.instances[{j}]"))
                for j, inst in enumerate(_require_list(raw, 'instances', where))
            ]
            blocks.append(RepeatingBlock(section_type, block_type, instances))

        return cls(sections=sections, repeating_blocks=blocks)


@dataclass
class ProfileCounts:
    """Desired number of entries per repeating section"""
    work_experience: int = 0
    education: int = 0
    languages: int = 0
    skills: int = 0

    def __post_init__(self):
        for name in ('work_experience', 'education', 'languages', 'skills'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} count must not be negative")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ProfileCounts':
        return cls(
            work_experience=int(data.get('workExperience', 0)),
            education=int(data.get('education', 0)),
            languages=int(data.get('languages', 0)),
            skills=int(data.get('skills', 0)),
        )

    def target_for(self, section_type: str) -> int:
        """Return the target count for a section type (0 when none is tracked)"""
        targets: Dict[str, int] = {
            'work_experience': self.work_experience,
            'education': self.education,
            'languages': self.languages,
            'skills': self.skills,
        }
        return targets.get(section_type, 0)
