"""Pydantic models for mirrored wiki pages and the records extracted from them."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

# --- Page mirror ---


class Tag(str, Enum):
    ITEM = "item"
    GE_ITEM = "ge_item"
    MONSTER = "monster"
    SHOP = "shop"
    SET = "set"
    ITEM_SPAWN = "item_spawn"


class Page(BaseModel):
    id: int
    title: str
    namespace: int | None = None
    revision_id: int | None = Field(default=None, alias="revisionId")
    parent_id: int | None = Field(default=None, alias="parentId")
    timestamp: datetime | None = None
    content_model: str | None = Field(default=None, alias="contentModel")
    text: str | None = None
    html: str | None = None
    display_title: str | None = Field(default=None, alias="displayTitle")
    properties: list[dict[str, str]] = Field(default_factory=list)
    last_full_fetch_revision_id: int | None = Field(default=None, alias="lastFullFetchRevisionId")
    aliases: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @property
    def is_stale(self) -> bool:
        if self.last_full_fetch_revision_id is None:
            return True
        return self.revision_id != self.last_full_fetch_revision_id


# --- Items ---


class EquipmentStats(BaseModel):
    attack_stab: int = Field(default=0, alias="attackStab")
    attack_slash: int = Field(default=0, alias="attackSlash")
    attack_crush: int = Field(default=0, alias="attackCrush")
    attack_magic: int = Field(default=0, alias="attackMagic")
    attack_ranged: int = Field(default=0, alias="attackRanged")
    defence_stab: int = Field(default=0, alias="defenceStab")
    defence_slash: int = Field(default=0, alias="defenceSlash")
    defence_crush: int = Field(default=0, alias="defenceCrush")
    defence_magic: int = Field(default=0, alias="defenceMagic")
    defence_ranged: int = Field(default=0, alias="defenceRanged")
    strength: int = 0
    ranged_strength: int = Field(default=0, alias="rangedStrength")
    magic_damage: float = Field(default=0, alias="magicDamage")
    prayer: int = 0
    slot: str | None = None
    speed: int | None = None
    attack_range: int | None = Field(default=None, alias="attackRange")
    combat_style: str | None = Field(default=None, alias="combatStyle")

    model_config = {"populate_by_name": True}


class Item(BaseModel):
    id: int = Field(gt=0)
    name: str
    examine: str | None = None
    image: str | None = None
    drop: str | None = None
    is_members: bool = Field(default=False, alias="isMembers")
    is_tradeable: bool = Field(default=False, alias="isTradeable")
    is_equipable: bool = Field(default=False, alias="isEquipable")
    is_stackable: bool = Field(default=False, alias="isStackable")
    is_on_exchange: bool = Field(default=False, alias="isOnExchange")
    is_alchable: bool = Field(default=False, alias="isAlchable")
    is_in_main_game: bool = Field(default=True, alias="isInMainGame")
    value: int = 0
    weight: float = 0.0
    buy_limit: int = Field(default=0, alias="buyLimit")
    equipment_stats: EquipmentStats | None = Field(default=None, alias="equipmentStats")
    related_items: list[int] = Field(default_factory=list, alias="relatedItems")
    aliases: list[str] = Field(default_factory=list)
    page_id: int | None = Field(default=None, alias="pageId")

    model_config = {"populate_by_name": True}


# --- Monsters ---


class MonsterCombatStats(BaseModel):
    attack: int = 0
    strength: int = 0
    defence: int = 0
    magic: int = 0
    ranged: int = 0
    attack_bonus: int = Field(default=0, alias="attackBonus")
    strength_bonus: int = Field(default=0, alias="strengthBonus")
    attack_magic: int = Field(default=0, alias="attackMagic")
    magic_bonus: int = Field(default=0, alias="magicBonus")
    attack_ranged: int = Field(default=0, alias="attackRanged")
    ranged_bonus: int = Field(default=0, alias="rangedBonus")
    defence_stab: int = Field(default=0, alias="defenceStab")
    defence_slash: int = Field(default=0, alias="defenceSlash")
    defence_crush: int = Field(default=0, alias="defenceCrush")
    defence_magic: int = Field(default=0, alias="defenceMagic")
    defence_ranged: int = Field(default=0, alias="defenceRanged")
    immune_poison: bool = Field(default=False, alias="immunePoison")
    immune_venom: bool = Field(default=False, alias="immuneVenom")
    immune_cannon: bool = Field(default=False, alias="immuneCannon")
    immune_thrall: bool = Field(default=False, alias="immuneThrall")

    model_config = {"populate_by_name": True}


class MonsterDrop(BaseModel):
    name: str
    item_id: int | None = Field(default=None, alias="itemId")
    quantity: str | None = None
    rarity: str | None = None

    model_config = {"populate_by_name": True}


class Monster(BaseModel):
    id: int = Field(gt=0)
    ids: list[int] = Field(default_factory=list)
    name: str
    version: str | None = None
    image: str | None = None
    examine: str | None = None
    members: bool = False
    level: int | None = None
    size: int | None = None
    hitpoints: int | None = None
    max_hit: int | None = Field(default=None, alias="maxHit")
    aggressive: bool = False
    poisonous: bool = False
    attack_style: str | None = Field(default=None, alias="attackStyle")
    attack_speed: int | None = Field(default=None, alias="attackSpeed")
    xp_bonus: float | None = Field(default=None, alias="xpBonus")
    slayer_xp: float | None = Field(default=None, alias="slayerXp")
    category: str | None = None
    assigned_by: list[str] = Field(default_factory=list, alias="assignedBy")
    respawn_time: int | None = Field(default=None, alias="respawnTime")
    drop_version: str | None = Field(default=None, alias="dropVersion")
    combat_stats: MonsterCombatStats = Field(
        default_factory=MonsterCombatStats, alias="combatStats"
    )
    drops: list[MonsterDrop] = Field(default_factory=list)
    aliases: list[str] = Field(default_factory=list)
    page_id: int | None = Field(default=None, alias="pageId")

    model_config = {"populate_by_name": True}


# --- Shops ---


class ShopItem(BaseModel):
    item_id: int = Field(alias="itemId", gt=0)
    base_stock: int | None = Field(default=None, alias="baseStock")
    restock_ticks: int | None = Field(default=None, alias="restockTicks")

    model_config = {"populate_by_name": True}


class Shop(BaseModel):
    name: str
    page_id: int = Field(alias="pageId")
    sell_multiplier: float = Field(default=0.0, alias="sellMultiplier")
    buy_multiplier: float = Field(default=0.0, alias="buyMultiplier")
    restock_delta: float = Field(default=0.0, alias="restockDelta")
    currency: str = "Coins"
    inventory: list[ShopItem] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


# --- Sets ---


class ItemSet(BaseModel):
    id: int | None = None
    name: str
    component_ids: list[int] = Field(default_factory=list, alias="componentIds")
    page_id: int | None = Field(default=None, alias="pageId")

    model_config = {"populate_by_name": True}


# --- Recipes ---


class RecipeMaterial(BaseModel):
    item_id: int = Field(alias="itemId", gt=0)
    quantity: float = Field(default=1, gt=0)
    cost: int | None = None
    notes: str | None = None
    text: str | None = None
    sub_text: str | None = Field(default=None, alias="subText")

    model_config = {"populate_by_name": True}


class RecipeSkill(BaseModel):
    name: str = "Unknown"
    level: int = 1
    xp: float = 0
    boostable: bool = True


class Recipe(BaseModel):
    name: str | None = None
    members: bool = False
    inputs: list[RecipeMaterial] = Field(default_factory=list)
    outputs: list[RecipeMaterial] = Field(default_factory=list)
    skills: list[RecipeSkill] = Field(default_factory=list)
    tool_ids: list[int] = Field(default_factory=list, alias="toolIds")
    ticks: int | None = None
    ticks_note: str | None = Field(default=None, alias="ticksNote")
    facility: str | None = None
    notes: str | None = None
    page_id: int | None = Field(default=None, alias="pageId")

    model_config = {"populate_by_name": True}


# --- Spawns ---


class SpawnCoordinates(BaseModel):
    x: int
    y: int
    plane: int = 0


class ItemSpawn(BaseModel):
    item_id: int = Field(alias="itemId", gt=0)
    item_name: str = Field(alias="itemName")
    coordinates: SpawnCoordinates
    quantity: int = Field(default=1, ge=1)
    members: bool = False
    location: str | None = None
    page_id: int | None = Field(default=None, alias="pageId")

    model_config = {"populate_by_name": True}


FAMILY_MODELS: dict[str, type[BaseModel]] = {
    "items": Item,
    "monsters": Monster,
    "shops": Shop,
    "sets": ItemSet,
    "recipes": Recipe,
    "spawns": ItemSpawn,
}
