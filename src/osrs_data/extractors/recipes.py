"""
Recipes from ``{{Recipe}}`` templates on item pages, plus the assemble and
disassemble recipes every item set implies.

Recipe parameters are numbered groups rather than variants:

    skill1 / skill1lvl / skill1exp / skill1boostable
    mat1 / mat1quantity / mat1cost / mat1itemnote / mat1txt / mat1subtxt
    output1 / output1quantity / ...
"""

import logging
import re
from collections import defaultdict

from osrs_data.exceptions import TemplateParseError
from osrs_data.models import ItemSet, Page, Recipe, RecipeMaterial, RecipeSkill
from osrs_data.resolver import EntityResolver
from osrs_data.templates import clean_markup, has_template, parse_templates
from osrs_data.variants import coerce

log = logging.getLogger(__name__)

RECIPE = "Recipe"
COINS_NAME = "Coins"
COINS_ID = 995
SET_RECIPE_TICKS = 1

_SKILL_RE = re.compile(r"^skill(\d+)(lvl|exp|boostable)?$")
_MATERIAL_SUFFIXES = "quantity|cost|itemnote|txt|subtxt"


def _groups(params: dict[str, str], pattern: re.Pattern[str]) -> list[dict[str, str]]:
    """Collect numbered parameter groups; the bare key is stored under ``""``."""
    groups: dict[int, dict[str, str]] = defaultdict(dict)
    for key, value in params.items():
        match = pattern.match(key)
        if match:
            groups[int(match.group(1))][match.group(2) or ""] = value
    return [groups[index] for index in sorted(groups)]


def parse_skills(params: dict[str, str]) -> list[RecipeSkill]:
    skills = []
    for group in _groups(params, _SKILL_RE):
        skill = RecipeSkill()
        if name := clean_markup(group.get("")):
            skill.name = name
        if (level := coerce(group.get("lvl"), "int")) is not None:
            skill.level = level
        if (xp := coerce(group.get("exp"), "float")) is not None:
            skill.xp = xp
        if (boostable := coerce(group.get("boostable"), "bool")) is not None:
            skill.boostable = boostable
        skills.append(skill)
    return skills


def _ticks(value: str | None) -> int | None:
    if value is None:
        return None
    value = value.strip()
    return int(value) if value.isdigit() else None


class RecipeExtractor:
    def __init__(self, resolver: EntityResolver):
        self._resolver = resolver

    def __call__(self, page: Page) -> list[Recipe] | None:
        return self.extract(page)

    def _item_id(self, name: str | None) -> int | None:
        if name and name.strip().lower() == COINS_NAME.lower():
            return COINS_ID
        return self._resolver.resolve_id(name)

    def parse_materials(self, params: dict[str, str], prefix: str) -> list[RecipeMaterial]:
        pattern = re.compile(rf"^{prefix}(\d+)({_MATERIAL_SUFFIXES})?$")
        materials = []
        for group in _groups(params, pattern):
            name = clean_markup(group.get(""))
            item_id = self._item_id(name)
            if item_id is None:
                log.info("Recipe uses an unknown item: %s", name)
                continue

            quantity = coerce(group.get("quantity"), "float")
            materials.append(
                RecipeMaterial(
                    item_id=item_id,
                    quantity=quantity if quantity and quantity > 0 else 1,
                    cost=coerce(group.get("cost"), "int"),
                    notes=clean_markup(group.get("itemnote")),
                    text=clean_markup(group.get("txt")),
                    sub_text=clean_markup(group.get("subtxt")),
                )
            )
        return materials

    def parse_tools(self, value: str | None) -> list[int]:
        tool_ids = []
        for name in coerce(value, "list") or []:
            tool_id = self._item_id(clean_markup(name))
            if tool_id is None:
                log.info("Recipe uses an unknown tool: %s", name)
                continue
            tool_ids.append(tool_id)
        return tool_ids

    def parse_recipe(self, params: dict[str, str], page: Page) -> Recipe:
        return Recipe(
            name=clean_markup(params.get("name")) or page.title,
            members=coerce(params.get("members"), "bool") or False,
            inputs=self.parse_materials(params, "mat"),
            outputs=self.parse_materials(params, "output"),
            skills=parse_skills(params),
            tool_ids=self.parse_tools(params.get("tools")),
            ticks=_ticks(params.get("ticks")),
            ticks_note=clean_markup(params.get("ticksnote")),
            facility=clean_markup(params.get("facilities")),
            notes=clean_markup(params.get("notes")),
            page_id=page.id,
        )

    def extract(self, page: Page) -> list[Recipe] | None:
        text = page.text
        if not text or not has_template(text, RECIPE):
            return None
        templates = [params for params in parse_templates(text, RECIPE) if params]
        if not templates:
            raise TemplateParseError(page.id, page.title, f"{RECIPE} has no parameters")
        recipes = [self.parse_recipe(params, page) for params in templates]
        log.debug("Parsed %d recipe(s) on page %s", len(recipes), page.title)
        return recipes

    def set_recipes(self, item_sets: list[ItemSet]) -> list[Recipe]:
        recipes = []
        for item_set in item_sets:
            if item_set.id is None or not item_set.component_ids:
                continue
            set_item = self._resolver.get_by_id(item_set.id)
            members = set_item.is_members if set_item else False
            whole = [RecipeMaterial(item_id=item_set.id)]
            parts = [RecipeMaterial(item_id=item_id) for item_id in item_set.component_ids]
            recipes.append(
                Recipe(
                    name=f"Assembling {item_set.name}",
                    members=members,
                    inputs=parts,
                    outputs=whole,
                    ticks=SET_RECIPE_TICKS,
                    page_id=item_set.page_id,
                )
            )
            recipes.append(
                Recipe(
                    name=f"Disassembling {item_set.name}",
                    members=members,
                    inputs=[m.model_copy() for m in whole],
                    outputs=[m.model_copy() for m in parts],
                    ticks=SET_RECIPE_TICKS,
                    page_id=item_set.page_id,
                )
            )
        log.info("Derived %d set recipe(s) from %d set(s)", len(recipes), len(item_sets))
        return recipes
