# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Callable, Sequence
from typing import Any


class Repeater:
    """
    Execute a given function for each item of a collection, with per-exception
    handling and tracking of returned values and encountered errors.

    A failure of one item does not prevent the remaining items from being processed
    as long as a handler is registered for the raised exception type.

    Attributes:
        items (Sequence[Any]): Items to process.
        results (dict[int, Any]): Item indices mapped to the values returned by the function.
        encountered_errors (dict[int, BaseException]): Item indices mapped to the handled exceptions.
        current_iteration (int): The index of the item currently being processed.

    Args:
        items (Sequence[Any]): Items to iterate over.
        func (Callable): Function to execute for each item. The item is passed
            as the first argument, followed by any `*args` and `**kwargs`.
        *args (Any): Positional arguments forwarded to `func`.
        **kwargs (Any): Keyword arguments forwarded to `func`.
    """

    def __init__(
        self,
        items: Sequence[Any],
        func: Callable,
        *args: Any,
        **kwargs: Any,
    ):
        self.items = items
        self.results: dict[int, Any] = {}
        self.encountered_errors: dict[int, BaseException] = {}
        self.current_iteration = 0

        self._handlers: dict[type[BaseException], Callable[..., Any]] = {}
        self._func = func
        self._args = args
        self._kwargs = kwargs

    def onException(self, exc_type: type[BaseException], handler: Callable) -> None:
        """
        Register a handler function for a specific exception type.

        The handler is also used for subclasses of `exc_type` unless a more
        specific handler is registered.

        Args:
            exc_type (type[BaseException]): The exception type to handle.
            handler (Callable): Function to call when `exc_type` is raised.
                The handler must accept two arguments:
                - BaseException: The caught exception instance.
                - Repeater: Reference to this `Repeater` instance.
        """
        self._handlers[exc_type] = handler

    def run(self) -> dict[int, Any]:
        """
        Execute the target function for all items, invoking handlers for exceptions.

        Unhandled exceptions propagate normally and interrupt the iteration.

        Returns:
            dict[int, Any]: Values returned by the function for items that did not fail.
        """
        for i, item in enumerate(self.items):
            self.current_iteration = i
            try:
                self.results[i] = self._func(item, *self._args, **self._kwargs)
            except tuple(self._handlers.keys()) as e:
                self.encountered_errors[i] = e
                self._handlerFor(e)(e, self)

        return self.results

    def currentItem(self) -> Any:
        """Return the item currently being processed."""
        return self.items[self.current_iteration]

    def _handlerFor(self, exception: BaseException) -> Callable[..., Any]:
        """Return the handler registered for the most specific base of the exception."""
        for cls in type(exception).__mro__:
            if cls in self._handlers:
                return self._handlers[cls]

        # should never get here since only registered types are caught
        raise KeyError(type(exception))
