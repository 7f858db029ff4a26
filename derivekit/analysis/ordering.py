"""Ascending-name order checks over enum variants and marked match arms."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..errors import Location, UnsupportedPatternError
from ..syntax.nodes import EnumItem, FnItem, MatchArm, MatchExpr

PATH_SEPARATOR = "::"
WILDCARD_MESSAGE = "_ should sort at the end"
UNSUPPORTED_MESSAGE = "unsupported by #[sorted]"


@dataclass(frozen=True)
class OrderItem:
    """A variant or match arm reduced to its comparable name."""

    name_path: Tuple[str, ...]
    location: Location
    is_wildcard: bool = False

    @property
    def name(self) -> str:
        return "_" if self.is_wildcard else PATH_SEPARATOR.join(self.name_path)


@dataclass(frozen=True)
class Violation:
    offending: str
    message: str
    location: Location
    must_precede: Optional[str] = None


@dataclass
class OrderingVerdict:
    """Every violation found by a scan; only the first one is reported."""

    violations: List[Violation] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def first(self) -> Optional[Violation]:
        return self.violations[0] if self.violations else None

    def extend(self, other: "OrderingVerdict") -> None:
        self.violations.extend(other.violations)


class OrderScan:
    """Linear scan state: names seen so far plus accumulated violations."""

    def __init__(self) -> None:
        self.seen: List[str] = []
        self.verdict = OrderingVerdict()

    def feed(self, item: OrderItem, *, is_last: bool) -> None:
        if item.is_wildcard:
            if not is_last:
                self.report(Violation(offending="_", message=WILDCARD_MESSAGE, location=item.location))
            return
        current = item.name
        for previous in self.seen:
            if current < previous:
                self.report(
                    Violation(
                        offending=current,
                        must_precede=previous,
                        message=f"{current} should sort before {previous}",
                        location=item.location,
                    )
                )
                break
        self.seen.append(current)

    def report(self, violation: Violation) -> None:
        self.verdict.violations.append(violation)


def check_order(items: Sequence[OrderItem]) -> OrderingVerdict:
    """Check that names ascend, allowing a single trailing wildcard."""
    scan = OrderScan()
    for index, item in enumerate(items):
        scan.feed(item, is_last=index == len(items) - 1)
    return scan.verdict


def check_enum(item: EnumItem) -> OrderingVerdict:
    return check_order(
        [OrderItem(name_path=(variant.name,), location=variant.location) for variant in item.variants]
    )


def arm_item(arm: MatchArm) -> OrderItem:
    """Extract the comparable name of a match arm."""
    pattern = arm.pattern
    if pattern.is_wildcard:
        return OrderItem(name_path=(), location=pattern.location, is_wildcard=True)
    if pattern.kind in ("ident", "path", "tuple_struct"):
        return OrderItem(name_path=tuple(pattern.path), location=pattern.location)
    raise UnsupportedPatternError(UNSUPPORTED_MESSAGE, pattern.location)


def check_match(expr: MatchExpr) -> OrderingVerdict:
    scan = OrderScan()
    for index, arm in enumerate(expr.arms):
        try:
            item = arm_item(arm)
        except UnsupportedPatternError as exc:
            scan.report(
                Violation(offending=arm.pattern.text, message=exc.message, location=exc.location or arm.pattern.location)
            )
            break
        scan.feed(item, is_last=index == len(expr.arms) - 1)
    return scan.verdict


def marked_matches(item: FnItem, marker: str) -> List[MatchExpr]:
    return [expr for expr in item.matches if any(attr.path == marker for attr in expr.attrs)]


def check_function(item: FnItem, marker: str = "sorted") -> OrderingVerdict:
    """Check every match expression carrying the `marker` attribute."""
    verdict = OrderingVerdict()
    for expr in marked_matches(item, marker):
        verdict.extend(check_match(expr))
    return verdict


__all__ = [
    "OrderItem",
    "OrderScan",
    "OrderingVerdict",
    "PATH_SEPARATOR",
    "UNSUPPORTED_MESSAGE",
    "Violation",
    "WILDCARD_MESSAGE",
    "arm_item",
    "check_enum",
    "check_function",
    "check_match",
    "check_order",
    "marked_matches",
]
