"""
CRS Specification Templates.

A template turns a few user-supplied values into a complete projection
specification. For example the "EPSG" template takes one parameter, the
EPSG code, and builds "EPSG:25832" and the label "EPSG 25832 coordinates".

Placeholders
------------
- Specification strings use positional placeholders %1, %2, ...
- Coordinates name patterns use @<parameter id>@ markers.

Substitution is purely textual. Supplying fewer values than there are
placeholders leaves the remaining placeholders in place; this is how a
template describes itself (e.g. "EPSG @code@ coordinates").

The registry is an immutable table built once at import time.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple
import re


_PLACEHOLDER = re.compile(r"%(\d+)")


def substitute_placeholders(text: str, values: Sequence[str]) -> str:
    """Replace positional placeholders %1..%n with the given values.

    Parameters
    ----------
    text : str
        Text containing %1, %2, ... placeholders.
    values : sequence of str
        Values for %1, %2, ... in this order.

    Returns
    -------
    str
        The text with every placeholder that has a value substituted.
        Placeholders without a value are left as they are.
    """
    def replace(match: re.Match) -> str:
        index = int(match.group(1)) - 1
        if 0 <= index < len(values):
            return str(values[index])
        return match.group(0)

    return _PLACEHOLDER.sub(replace, text)


class CRSTemplateParameter:
    """A named parameter of a CRS template.

    Parameters
    ----------
    id : str
        Identifier, also used as the @id@ marker in coordinates names.
    name : str
        Human-readable name.
    """

    def __init__(self, id: str, name: str):
        self._id = id
        self._name = name

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    def spec_values(self, edit_value: str) -> List[str]:
        """Expand a user value into the specification values it fills.

        One parameter may fill several positional placeholders.
        """
        return [edit_value]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._id!r})"


class FullSpecParameter(CRSTemplateParameter):
    """A parameter whose value is a complete specification."""


class IntRangeParameter(CRSTemplateParameter):
    """An integer parameter within [min_value, max_value].

    Parameters
    ----------
    outputs : sequence of (factor, bias)
        Each pair produces one specification value
        ``value * factor + bias``. Default: the value itself.
    """

    def __init__(
        self,
        id: str,
        name: str,
        min_value: int,
        max_value: int,
        outputs: Sequence[Tuple[int, int]] = ((1, 0),)
    ):
        super().__init__(id, name)
        self.min_value = min_value
        self.max_value = max_value
        self.outputs = tuple(outputs)

    def spec_values(self, edit_value: str) -> List[str]:
        try:
            value = int(str(edit_value).strip())
        except ValueError as e:
            raise ValueError(f"{self.name}: not an integer: {edit_value!r}") from e
        if not self.min_value <= value <= self.max_value:
            raise ValueError(
                f"{self.name}: {value} out of range [{self.min_value}, {self.max_value}]"
            )
        return [str(value * factor + bias) for factor, bias in self.outputs]


class UTMZoneParameter(CRSTemplateParameter):
    """A UTM zone such as "32", "32 N" or "33S"."""

    _ZONE = re.compile(r"^\s*(\d{1,2})\s*([NS]?)\s*$", re.IGNORECASE)

    def spec_values(self, edit_value: str) -> List[str]:
        match = self._ZONE.match(str(edit_value))
        if not match or not 1 <= int(match.group(1)) <= 60:
            raise ValueError(f"{self.name}: invalid UTM zone {edit_value!r}")
        zone = str(int(match.group(1)))
        if match.group(2).upper() == "S":
            zone += " +south"
        return [zone]


@dataclass(frozen=True)
class CRSTemplate:
    """A parameterized projection specification.

    Attributes
    ----------
    id : str
        Registry key, e.g. "EPSG".
    name : str
        Human-readable name of the template.
    coordinates_name_pattern : str
        Display label of the resulting coordinates, with @id@ markers.
    specification_template : str
        Specification with %1, %2, ... placeholders.
    parameters : tuple of CRSTemplateParameter
        Ordered parameters; the count is fixed per template.
    """
    id: str
    name: str
    coordinates_name_pattern: str
    specification_template: str
    parameters: Tuple[CRSTemplateParameter, ...] = ()

    def specification(self, values: Sequence[str]) -> str:
        """Build the specification for the given parameter values.

        Each value is expanded through its parameter; missing values leave
        their placeholders in place.

        Raises
        ------
        ValueError
            If a value is not acceptable for its parameter.
        """
        spec_values: List[str] = []
        for parameter, value in zip(self.parameters, values):
            spec_values.extend(parameter.spec_values(value))
        return substitute_placeholders(self.specification_template, spec_values)

    def coordinates_name(self, values: Sequence[str] = ()) -> str:
        """Return the coordinates label with the given values substituted.

        Without values the @id@ markers are left in place.
        """
        name = self.coordinates_name_pattern
        for parameter, value in zip(self.parameters, values):
            name = name.replace(f"@{parameter.id}@", str(value))
        return name


def _builtin_templates() -> Tuple[CRSTemplate, ...]:
    return (
        CRSTemplate(
            id="UTM",
            name="UTM",
            coordinates_name_pattern="UTM coordinates",
            specification_template="+proj=utm +zone=%1 +datum=WGS84",
            parameters=(UTMZoneParameter("zone", "UTM Zone (number north/south)"),)
        ),
        CRSTemplate(
            id="Gauss-Krueger, datum: Potsdam",
            name="Gauss-Krüger, datum: Potsdam",
            coordinates_name_pattern="Gauss-Krüger coordinates",
            specification_template=(
                "+proj=tmerc +lat_0=0 +lon_0=%1 +k=1.000000 +x_0=%2 +y_0=0 "
                "+ellps=bessel +datum=potsdam +units=m +no_defs"
            ),
            parameters=(
                IntRangeParameter("zone", "Zone number (1 to 119)", 1, 119,
                                  outputs=((3, 0), (1000000, 500000))),
            )
        ),
        CRSTemplate(
            id="EPSG",
            name="by EPSG code",
            coordinates_name_pattern="EPSG @code@ coordinates",
            specification_template="EPSG:%1",
            parameters=(IntRangeParameter("code", "EPSG code", 0, 999999),)
        ),
        CRSTemplate(
            id="PROJ.4",
            name="Custom PROJ.4 specification",
            coordinates_name_pattern="Local coordinates",
            specification_template="%1",
            parameters=(FullSpecParameter("spec", "Specification"),)
        ),
    )


_REGISTRY: Tuple[CRSTemplate, ...] = _builtin_templates()


class CRSTemplateRegistry:
    """Read-only catalog of the built-in CRS templates.

    Instances are cheap views of one process-wide table; templates returned
    by `find` live as long as the process.
    """

    def find(self, id: str) -> Optional[CRSTemplate]:
        """Return the template with exactly this id, or None."""
        for template in _REGISTRY:
            if template.id == id:
                return template
        return None

    def list(self) -> Tuple[CRSTemplate, ...]:
        """All templates in registration order."""
        return _REGISTRY

    def __iter__(self) -> Iterator[CRSTemplate]:
        return iter(_REGISTRY)
