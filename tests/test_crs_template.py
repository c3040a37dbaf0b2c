import pytest

from georeferencing.crs_template import (
    CRSTemplateRegistry,
    FullSpecParameter,
    IntRangeParameter,
    UTMZoneParameter,
    substitute_placeholders,
)


def test_registry_lists_builtin_templates_in_order() -> None:
    ids = [template.id for template in CRSTemplateRegistry().list()]
    assert ids == ["UTM", "Gauss-Krueger, datum: Potsdam", "EPSG", "PROJ.4"]
    assert [t.id for t in CRSTemplateRegistry()] == ids


def test_registry_find_unknown_returns_none() -> None:
    assert CRSTemplateRegistry().find("no such template") is None
    assert CRSTemplateRegistry().find("epsg") is None


def test_epsg_template() -> None:
    epsg = CRSTemplateRegistry().find("EPSG")
    assert epsg is not None
    assert len(epsg.parameters) == 1

    assert epsg.coordinates_name() == "EPSG @code@ coordinates"
    assert epsg.coordinates_name(["4326"]) == "EPSG 4326 coordinates"

    assert epsg.specification_template == "EPSG:%1"
    assert substitute_placeholders(epsg.specification_template, ["5514"]) == "EPSG:5514"
    assert epsg.specification(["5514"]) == "EPSG:5514"


def test_epsg_template_rejects_non_numeric_code() -> None:
    epsg = CRSTemplateRegistry().find("EPSG")
    with pytest.raises(ValueError):
        epsg.specification(["WGS84"])


@pytest.mark.parametrize("zone, expected", [
    ("32", "+proj=utm +zone=32 +datum=WGS84"),
    ("32 N", "+proj=utm +zone=32 +datum=WGS84"),
    ("33s", "+proj=utm +zone=33 +south +datum=WGS84"),
])
def test_utm_template(zone, expected) -> None:
    utm = CRSTemplateRegistry().find("UTM")
    assert utm.specification([zone]) == expected


@pytest.mark.parametrize("zone", ["0", "61", "32X", ""])
def test_utm_zone_parameter_rejects_invalid_zones(zone) -> None:
    with pytest.raises(ValueError):
        UTMZoneParameter("zone", "UTM Zone").spec_values(zone)


def test_gauss_krueger_template_fills_two_placeholders() -> None:
    gk = CRSTemplateRegistry().find("Gauss-Krueger, datum: Potsdam")
    assert gk.name == "Gauss-Krüger, datum: Potsdam"
    assert gk.specification(["3"]) == (
        "+proj=tmerc +lat_0=0 +lon_0=9 +k=1.000000 +x_0=3500000 +y_0=0 "
        "+ellps=bessel +datum=potsdam +units=m +no_defs"
    )


def test_proj4_template_passes_spec_through() -> None:
    custom = CRSTemplateRegistry().find("PROJ.4")
    spec = "+proj=tmerc +lon_0=10 +datum=WGS84"
    assert custom.specification([spec]) == spec
    assert isinstance(custom.parameters[0], FullSpecParameter)


def test_partial_substitution_keeps_placeholders() -> None:
    assert substitute_placeholders("+lon_0=%1 +x_0=%2", ["6"]) == "+lon_0=6 +x_0=%2"
    assert substitute_placeholders("%1-%1", ["a"]) == "a-a"
    assert substitute_placeholders("no placeholders", ["x"]) == "no placeholders"


def test_int_range_parameter() -> None:
    parameter = IntRangeParameter("zone", "Zone", 1, 119, outputs=((3, 0), (1000000, 500000)))
    assert parameter.spec_values(" 2 ") == ["6", "2500000"]
    with pytest.raises(ValueError):
        parameter.spec_values("120")
    with pytest.raises(ValueError):
        parameter.spec_values("two")
