"""Service per le categorie dell'utente"""
import re
from typing import List, Optional, Tuple

from batvault.models.category import Category
from batvault.services import BaseService

COLOR_RE = re.compile(r'^#[0-9A-Fa-f]{6}$')


class CategoryService(BaseService):

    def create(self, owner_id: str, name: str, color: str = '#CCCCCC') -> Tuple[bool, str, Optional[Category]]:
        if not isinstance(name, str) or not name.strip():
            return False, "Category name is required", None
        color = color or '#CCCCCC'
        if not COLOR_RE.match(color):
            return False, "Color must be a hex value like #FF9800", None

        category = Category(user_id=owner_id, name=name.strip(), color=color.upper())
        success, message = self.save(category)
        if not success:
            return False, f"Error while creating: {message}", None
        return True, f"Category {category.name} created", category

    def list_for_owner(self, owner_id: str) -> List[Category]:
        return Category.query.filter_by(user_id=owner_id).order_by(Category.name.asc()).all()
