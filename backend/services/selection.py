from typing import Iterable, List


class SelectionState:
    """Row selection for bulk actions, ordered by the time rows were picked."""

    def __init__(self) -> None:
        self._selected: List[str] = []
        self.select_all = False

    @property
    def selected(self) -> List[str]:
        return list(self._selected)

    def __len__(self) -> int:
        return len(self._selected)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._selected

    def toggle(self, order_id: str) -> bool:
        if order_id in self._selected:
            self._selected.remove(order_id)
            # A row dropped under select-all must stay dropped.
            self.select_all = False
            return False
        self._selected.append(order_id)
        return True

    def toggle_all(self, visible_ids: Iterable[str]) -> None:
        if self.select_all:
            self.clear()
            return
        self._selected = list(dict.fromkeys(visible_ids))
        self.select_all = True

    def retain(self, visible_ids: Iterable[str]) -> None:
        keep = set(visible_ids)
        self._selected = [order_id for order_id in self._selected if order_id in keep]

    def clear(self) -> None:
        self._selected = []
        self.select_all = False
