from decimal import Decimal

import pytest

from clinic.models import Treatment
from clinic.services.odontogram import build_chart, teeth_for


def _treatment(tooth, procedure="Filling"):
    return Treatment(patient_id=1, tooth_number=tooth, procedure_name=procedure, cost=Decimal("10"))


def test_permanent_layout_has_32_teeth_in_chart_order():
    layout = teeth_for("permanent")
    assert list(layout) == ["upper_right", "upper_left", "lower_left", "lower_right"]
    assert layout["upper_right"][0] == 18
    assert layout["upper_right"][-1] == 11
    assert layout["lower_right"] == (48, 47, 46, 45, 44, 43, 42, 41)
    assert sum(len(teeth) for teeth in layout.values()) == 32


def test_primary_and_mixed_layouts():
    assert sum(len(teeth) for teeth in teeth_for("primary").values()) == 20
    mixed = teeth_for("mixed")
    assert sum(len(teeth) for teeth in mixed.values()) == 52
    assert 55 in mixed["upper_right"] and 18 in mixed["upper_right"]


def test_unknown_dentition_is_rejected():
    with pytest.raises(ValueError):
        teeth_for("canine")


def test_build_chart_groups_procedures_by_tooth():
    chart = build_chart(
        [_treatment(11, "Filling"), _treatment(11, "Crown"), _treatment(55), _treatment(None)]
    )

    teeth = {tooth.number: tooth for q in chart.quadrants for tooth in q.teeth}
    assert teeth[11].treated
    assert teeth[11].procedures == ["Filling", "Crown"]
    assert not teeth[21].treated
    assert chart.treated_teeth == [11]
    assert [t.tooth_number for t in chart.uncharted] == [55, None]


def test_patient_odontogram_endpoint(client, patient):
    for tooth, procedure in ((11, "Filling"), (11, "Crown"), (55, "Extraction"), (0, "Cleaning")):
        client.post(
            "/api/treatments",
            json={
                "patientId": patient["id"],
                "toothNumber": tooth,
                "procedureName": procedure,
                "cost": "10",
            },
        )

    response = client.get(f"/api/patients/{patient['id']}/odontogram")
    assert response.status_code == 200
    body = response.json()
    assert body["patientId"] == patient["id"]
    assert body["dentition"] == "permanent"
    assert [q["title"] for q in body["quadrants"]] == [
        "Upper Right",
        "Upper Left",
        "Lower Left",
        "Lower Right",
    ]
    upper_right = {tooth["number"]: tooth for tooth in body["quadrants"][0]["teeth"]}
    assert upper_right[11]["treated"] is True
    assert sorted(upper_right[11]["procedures"]) == ["Crown", "Filling"]
    assert upper_right[12]["treated"] is False
    assert body["treatedTeeth"] == [11]
    assert sorted(t["procedureName"] for t in body["unchartedTreatments"]) == [
        "Cleaning",
        "Extraction",
    ]

    mixed = client.get(
        f"/api/patients/{patient['id']}/odontogram", params={"dentition": "mixed"}
    ).json()
    assert mixed["treatedTeeth"] == [11, 55]
    assert [t["procedureName"] for t in mixed["unchartedTreatments"]] == ["Cleaning"]


def test_odontogram_for_unknown_patient_is_404(client):
    response = client.get("/api/patients/321/odontogram")
    assert response.status_code == 404


def test_odontogram_rejects_unknown_dentition(client, patient):
    response = client.get(
        f"/api/patients/{patient['id']}/odontogram", params={"dentition": "canine"}
    )
    assert response.status_code == 400
    assert response.json()["field"] == "dentition"


def test_procedures_without_tooth_are_uncharted_in_every_dentition():
    cleaning = _treatment(None, "Cleaning")
    for dentition in ("permanent", "primary", "mixed"):
        chart = build_chart([cleaning], dentition)
        assert chart.uncharted == [cleaning]
        assert chart.treated_teeth == []
