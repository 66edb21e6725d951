"""
Intrusive Doubly-Linked List
============================

A small doubly-linked list whose links live inside the stored objects.
Any object that mixes in ListEntry can be appended to (at most) one
LinkedList at a time; appending and removing are O(1) and iteration is
safe against removal of the element currently being visited.

The lexer uses it for the token sequence: tokens are appended as they are
scanned and the parser removes each one after consuming it.

Example
-------
>>> class Item(ListEntry):
...     def __init__(self, value):
...         self.value = value
>>> items = LinkedList()
>>> for n in range(3):
...     items.append(Item(n))
>>> for item in items:
...     if item.value == 1:
...         items.remove(item)
>>> [item.value for item in items]
[0, 2]
"""

from typing import Generic, Iterator, Optional, TypeVar


class ListEntry:
    """
    Mixin providing the links for membership in a LinkedList.

    The links are plain class-level defaults so subclasses (including
    dataclasses) need no cooperation in __init__.
    """

    list_prev: Optional["ListEntry"] = None
    list_next: Optional["ListEntry"] = None
    list_owner: Optional["LinkedList"] = None


E = TypeVar("E", bound=ListEntry)


class LinkedList(Generic[E]):
    """
    Doubly-linked list of ListEntry objects.

    Attributes:
        head: First entry, or None when empty
        tail: Last entry, or None when empty
    """

    def __init__(self) -> None:
        self.head: Optional[E] = None
        self.tail: Optional[E] = None
        self._size = 0

    def append(self, entry: E) -> None:
        """
        Add an entry at the tail.

        Raises:
            ValueError: If the entry is already in a list
        """
        if entry.list_owner is not None:
            raise ValueError("entry already belongs to a list")

        entry.list_owner = self
        entry.list_prev = self.tail
        entry.list_next = None

        if self.tail is None:
            self.head = entry
        else:
            self.tail.list_next = entry
        self.tail = entry
        self._size += 1

    def remove(self, entry: E) -> None:
        """
        Unlink an entry from this list.

        Raises:
            ValueError: If the entry is not in this list
        """
        if entry.list_owner is not self:
            raise ValueError("entry does not belong to this list")

        if entry.list_prev is None:
            self.head = entry.list_next
        else:
            entry.list_prev.list_next = entry.list_next

        if entry.list_next is None:
            self.tail = entry.list_prev
        else:
            entry.list_next.list_prev = entry.list_prev

        entry.list_prev = None
        entry.list_next = None
        entry.list_owner = None
        self._size -= 1

    def clear(self) -> None:
        """Remove every entry."""
        for entry in self:
            self.remove(entry)

    def __iter__(self) -> Iterator[E]:
        # The successor is fetched before yielding so the caller may
        # remove the current entry.
        entry = self.head
        while entry is not None:
            following = entry.list_next
            yield entry
            entry = following

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({list(self)!r})"
