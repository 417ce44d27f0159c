"""The fixed menu the app sells from."""

from dataclasses import dataclass

from storefront.models import CartItem


@dataclass(frozen=True)
class MenuItem:
    id: str
    name: str
    price: float
    description: str
    image: str

    def to_cart_item(self) -> CartItem:
        return CartItem(
            id=self.id,
            name=self.name,
            price=self.price,
            quantity=1,
            image=self.image,
            description=self.description,
        )


MENU_ITEMS: tuple[MenuItem, ...] = (
    MenuItem(
        id="1",
        name="Mie Ayam Original",
        price=25000,
        description="Chicken noodles topped with minced chicken and fresh greens",
        image="https://images.unsplash.com/photo-1612929633738-8fe44f7ec841?auto=format&fit=crop&w=800",
    ),
    MenuItem(
        id="2",
        name="Mie Ayam Spesial",
        price=30000,
        description="Chicken noodles with mushrooms, meatballs and fried wontons",
        image="https://images.unsplash.com/photo-1569718212165-3a8278d5f624?auto=format&fit=crop&w=800",
    ),
    MenuItem(
        id="3",
        name="Mie Ayam Pedas",
        price=28000,
        description="Chicken noodles with sambal and bird's eye chili",
        image="https://images.unsplash.com/photo-1632467674545-57e8c77e4891?auto=format&fit=crop&w=800",
    ),
)


def find_menu_item(item_id: str) -> MenuItem | None:
    return next((item for item in MENU_ITEMS if item.id == item_id), None)
