"""Screen definitions: which resources each data-bearing screen shows."""

from __future__ import annotations

from dataclasses import dataclass

from khata.schema.cache import ResourceKey


@dataclass(frozen=True)
class ScreenDefinition:
    """A screen and the fixed set of resources it declares."""

    name: str
    resource_keys: tuple[ResourceKey, ...]

    @property
    def cache_keys(self) -> list[str]:
        return [key.cache_key for key in self.resource_keys]


KHATA_SCREEN = ScreenDefinition(
    name="khata",
    resource_keys=(
        ResourceKey.DASHBOARD,
        ResourceKey.TRANSACTIONS,
        ResourceKey.CUSTOMERS,
        ResourceKey.PROFILE,
    ),
)

INVENTORY_SCREEN = ScreenDefinition(name="inventory", resource_keys=(ResourceKey.PRODUCTS,))

PROFILE_SCREEN = ScreenDefinition(name="profile", resource_keys=(ResourceKey.PROFILE,))

SCREENS: dict[str, ScreenDefinition] = {
    screen.name: screen for screen in (KHATA_SCREEN, INVENTORY_SCREEN, PROFILE_SCREEN)
}
