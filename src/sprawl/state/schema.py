"""
Pydantic models for Sprawl faction and economy state.

All state is versioned for migration support.
Designed to serialize to JSON but structured like database tables:
every table in EngineState is a dict keyed by record id.
"""

from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------

class FactionType(str, Enum):
    CORPORATION = "Corporation"    # Megacorp arcologies, security divisions
    CREW = "Crew"                  # Small professional outfits
    SYNDICATE = "Syndicate"        # Organized crime, smuggling rings
    YOUNG_TEAM = "YoungTeam"       # Street gangs, block crews
    UNDERGROUND = "Underground"    # Netrunner cells, resistance networks
    INDEPENDENT = "Independent"    # Traders, free agents
    PLAYER = "Player"              # The player's own outfit


class Standing(str, Enum):
    HOSTILE = "Hostile"
    UNFRIENDLY = "Unfriendly"
    NEUTRAL = "Neutral"
    FRIENDLY = "Friendly"
    ALLIED = "Allied"

    @property
    def rank(self) -> int:
        """Position in the standing order, Hostile = 0."""
        return STANDING_RANKS[self]

    @classmethod
    def parse(cls, value: "str | Standing | None") -> "Standing | None":
        """Resolve a tier name (case-insensitive). None if unrecognized."""
        if isinstance(value, Standing):
            return value
        if not isinstance(value, str):
            return None
        for standing in cls:
            if standing.value.lower() == value.strip().lower():
                return standing
        return None


STANDING_RANKS: dict[Standing, int] = {
    Standing.HOSTILE: 0,
    Standing.UNFRIENDLY: 1,
    Standing.NEUTRAL: 2,
    Standing.FRIENDLY: 3,
    Standing.ALLIED: 4,
}


class Relationship(str, Enum):
    AT_WAR = "AtWar"
    HOSTILE = "Hostile"
    RIVAL = "Rival"
    NEUTRAL = "Neutral"
    FRIENDLY = "Friendly"
    ALLIED = "Allied"

    @classmethod
    def parse(cls, value: "str | Relationship") -> "Relationship | None":
        if isinstance(value, Relationship):
            return value
        normalized = str(value).replace(" ", "").replace("_", "").lower()
        for relationship in cls:
            if relationship.value.lower() == normalized:
                return relationship
        return None


HOSTILE_RELATIONSHIPS = frozenset({Relationship.AT_WAR, Relationship.HOSTILE})
ALLIED_RELATIONSHIPS = frozenset({Relationship.ALLIED, Relationship.FRIENDLY})


class Rarity(str, Enum):
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"


class VendorType(str, Enum):
    BLACK_MARKET = "BlackMarket"
    CORPORATE_STORE = "CorporateStore"
    STREET_VENDOR = "StreetVendor"
    FIXER = "Fixer"
    RIPPERDOC = "Ripperdoc"
    PAWNSHOP = "Pawnshop"


# -----------------------------------------------------------------------------
# Constant tables
# -----------------------------------------------------------------------------

class FactionTypeInfo(BaseModel):
    """Per-type defaults. Looked up, never mutated."""
    model_config = ConfigDict(frozen=True)

    organization_level: int
    danger_level: int
    wealth_level: int
    services: tuple[str, ...] = ()


FACTION_TYPE_INFO: dict[FactionType, FactionTypeInfo] = {
    FactionType.CORPORATION: FactionTypeInfo(
        organization_level=5, danger_level=3, wealth_level=5,
        services=("Employment", "Security", "Cyberware", "Banking"),
    ),
    FactionType.CREW: FactionTypeInfo(
        organization_level=2, danger_level=3, wealth_level=2,
        services=("Muscle", "Smuggling"),
    ),
    FactionType.SYNDICATE: FactionTypeInfo(
        organization_level=4, danger_level=4, wealth_level=4,
        services=("Black Market", "Loans", "Protection"),
    ),
    FactionType.YOUNG_TEAM: FactionTypeInfo(
        organization_level=1, danger_level=2, wealth_level=1,
        services=("Street Intel", "Lookouts"),
    ),
    FactionType.UNDERGROUND: FactionTypeInfo(
        organization_level=3, danger_level=2, wealth_level=2,
        services=("Hacking", "Forgery", "Safe Houses"),
    ),
    FactionType.INDEPENDENT: FactionTypeInfo(
        organization_level=1, danger_level=1, wealth_level=2,
        services=("Trade",),
    ),
    FactionType.PLAYER: FactionTypeInfo(
        organization_level=1, danger_level=0, wealth_level=1,
    ),
}


class StandingTier(BaseModel):
    """One row of the standing table. min_score None = no lower bound."""
    model_config = ConfigDict(frozen=True)

    standing: Standing
    min_score: int | None
    price_modifier: float
    access_level: int
    attack_on_sight: bool = False


# Ascending. Tier lookup picks the highest min_score <= score.
STANDING_TIERS: tuple[StandingTier, ...] = (
    StandingTier(standing=Standing.HOSTILE, min_score=None,
                 price_modifier=2.0, access_level=0, attack_on_sight=True),
    StandingTier(standing=Standing.UNFRIENDLY, min_score=-49,
                 price_modifier=1.5, access_level=1),
    StandingTier(standing=Standing.NEUTRAL, min_score=0,
                 price_modifier=1.0, access_level=2),
    StandingTier(standing=Standing.FRIENDLY, min_score=50,
                 price_modifier=0.9, access_level=3),
    StandingTier(standing=Standing.ALLIED, min_score=100,
                 price_modifier=0.8, access_level=4),
)


RARITY_PRICE_MODIFIERS: dict[Rarity, float] = {
    Rarity.COMMON: 1.0,
    Rarity.UNCOMMON: 1.5,
    Rarity.RARE: 2.5,
    Rarity.EPIC: 5.0,
    Rarity.LEGENDARY: 10.0,
}


class VendorTypeInfo(BaseModel):
    """Shop archetype rules. accepted_categories empty = takes anything."""
    model_config = ConfigDict(frozen=True)

    markup: float
    buyback_rate: float
    min_standing: Standing
    accepted_categories: tuple[str, ...] = ()
    sells_legal: bool = True
    sells_illegal: bool = False


VENDOR_TYPES: dict[VendorType, VendorTypeInfo] = {
    VendorType.BLACK_MARKET: VendorTypeInfo(
        markup=1.8, buyback_rate=0.4, min_standing=Standing.UNFRIENDLY,
        sells_illegal=True,
    ),
    VendorType.CORPORATE_STORE: VendorTypeInfo(
        markup=1.5, buyback_rate=0.5, min_standing=Standing.NEUTRAL,
        accepted_categories=("Weapon", "Armor", "Cyberware", "Consumable", "Tech"),
    ),
    VendorType.STREET_VENDOR: VendorTypeInfo(
        markup=1.2, buyback_rate=0.6, min_standing=Standing.HOSTILE,
        accepted_categories=("Consumable", "Junk", "Tech"),
    ),
    VendorType.FIXER: VendorTypeInfo(
        markup=1.4, buyback_rate=0.55, min_standing=Standing.FRIENDLY,
        sells_illegal=True,
    ),
    VendorType.RIPPERDOC: VendorTypeInfo(
        markup=1.6, buyback_rate=0.45, min_standing=Standing.NEUTRAL,
        accepted_categories=("Cyberware", "Medical"),
        sells_illegal=True,
    ),
    VendorType.PAWNSHOP: VendorTypeInfo(
        markup=1.3, buyback_rate=0.65, min_standing=Standing.HOSTILE,
    ),
}


SUPPLY_MODIFIER_MIN = 0.5
SUPPLY_MODIFIER_MAX = 3.0


# -----------------------------------------------------------------------------
# Core Models
# -----------------------------------------------------------------------------

class Faction(BaseModel):
    """A faction record. Territory set mirrors the territory table."""
    id: str
    name: str
    type: FactionType
    description: str = ""
    is_active: bool = True
    is_hidden: bool = False
    controlled_territories: set[str] = Field(default_factory=set)

    # Per-instance overrides of FACTION_TYPE_INFO
    danger_level: int | None = None
    wealth_level: int | None = None
    services: list[str] | None = None

    leader: str | None = None
    headquarters: str | None = None
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def type_info(self) -> FactionTypeInfo:
        return FACTION_TYPE_INFO[self.type]

    @property
    def effective_danger(self) -> int:
        if self.danger_level is not None:
            return self.danger_level
        return self.type_info.danger_level

    @property
    def effective_wealth(self) -> int:
        if self.wealth_level is not None:
            return self.wealth_level
        return self.type_info.wealth_level

    @property
    def effective_services(self) -> list[str]:
        if self.services is not None:
            return list(self.services)
        return list(self.type_info.services)


class ReputationRecord(BaseModel):
    """Player's numeric reputation with one faction."""
    faction_id: str
    score: int = 0
    updated_at: datetime = Field(default_factory=datetime.now)


class ReputationChange(BaseModel):
    """Audit entry for one score mutation."""
    faction_id: str
    old_score: int
    new_score: int
    delta: int
    reason: str = ""
    source: str = "direct"  # direct, rivalry, set
    timestamp: datetime = Field(default_factory=datetime.now)


def relationship_key(faction_a: str, faction_b: str) -> str:
    """Canonical key for an undirected faction pair."""
    first, second = sorted((faction_a, faction_b))
    return f"{first}|{second}"


class FactionRelationship(BaseModel):
    """Explicit relationship between two factions (stored once per pair)."""
    faction_a: str
    faction_b: str
    relationship: Relationship = Relationship.NEUTRAL
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def key(self) -> str:
        return relationship_key(self.faction_a, self.faction_b)

    def involves(self, faction_id: str) -> bool:
        return faction_id in (self.faction_a, self.faction_b)

    def other(self, faction_id: str) -> str:
        return self.faction_b if faction_id == self.faction_a else self.faction_a


class Item(BaseModel):
    """Catalog entry."""
    id: str
    name: str
    base_price: int = Field(ge=0)
    rarity: Rarity = Rarity.COMMON
    category: str
    is_illegal: bool = False

    @property
    def rarity_modifier(self) -> float:
        return RARITY_PRICE_MODIFIERS[self.rarity]


class ShopStock(BaseModel):
    """Inventory line for one item in one shop."""
    item_id: str
    quantity: int | None = None  # None = unlimited
    custom_price: int | None = None


class Shop(BaseModel):
    id: str
    name: str
    vendor_type: VendorType
    faction_id: str | None = None
    is_active: bool = True
    markup_modifier: float = 1.0
    custom_pricing: dict[str, int] = Field(default_factory=dict)
    inventory: dict[str, ShopStock] = Field(default_factory=dict)

    @property
    def vendor_info(self) -> VendorTypeInfo:
        return VENDOR_TYPES[self.vendor_type]

    @property
    def effective_markup(self) -> float:
        return self.vendor_info.markup * self.markup_modifier


class SupplyModifier(BaseModel):
    """Category-wide price multiplier driven by world events."""
    category: str
    modifier: float = 1.0
    reason: str = ""
    updated_at: datetime = Field(default_factory=datetime.now)


# -----------------------------------------------------------------------------
# Engine state
# -----------------------------------------------------------------------------

class EngineState(BaseModel):
    """Every in-memory table the engine owns."""
    factions: dict[str, Faction] = Field(default_factory=dict)
    reputations: dict[str, ReputationRecord] = Field(default_factory=dict)
    relationships: dict[str, FactionRelationship] = Field(default_factory=dict)
    territories: dict[str, str] = Field(default_factory=dict)  # territory -> faction
    items: dict[str, Item] = Field(default_factory=dict)
    shops: dict[str, Shop] = Field(default_factory=dict)
    supply_modifiers: dict[str, SupplyModifier] = Field(default_factory=dict)


class StateSnapshot(EngineState):
    """Serializable export of EngineState."""
    schema_version: int = 1
    exported_at: datetime = Field(default_factory=datetime.now)

    def to_state(self) -> EngineState:
        return EngineState.model_validate(
            self.model_dump(exclude={"schema_version", "exported_at"})
        )
