"""마커 타입 카탈로그

런타임에는 변경하지 않는 정적 정의 목록이다. 순서가 해석기의 동률 처리
순서가 되므로 항목 순서를 바꿀 때 주의한다.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from bodymap.models.catalog import (
    BodyView,
    LateralityAdjustment,
    MarkerCategory,
    MarkerTypeDefinition,
    Point,
)


def _side(x: float, y: float, region: str | None = None) -> LateralityAdjustment:
    return LateralityAdjustment(position=Point(x=x, y=y), body_region=region)


def _definition(
    marker_type: str,
    display_name: str,
    category: MarkerCategory,
    region: str,
    position: tuple[float, float],
    keywords: Iterable[str],
    view: BodyView = "front",
    left: LateralityAdjustment | None = None,
    right: LateralityAdjustment | None = None,
    badge: tuple[str, str, str] | None = None,
) -> MarkerTypeDefinition:
    adjustments: dict = {}
    if left is not None:
        adjustments["left"] = left
    if right is not None:
        adjustments["right"] = right
    icon, color, label = badge if badge else (None, None, None)
    return MarkerTypeDefinition(
        type=marker_type,
        display_name=display_name,
        category=category,
        default_body_region=region,
        default_body_view=view,
        default_position=Point(x=position[0], y=position[1]),
        keywords=tuple(keyword.lower() for keyword in keywords),
        laterality_adjustments=adjustments or None,
        is_status_badge=badge is not None,
        badge_icon=icon,
        badge_color=color,
        badge_label=label,
    )


MARKER_TYPES: tuple[MarkerTypeDefinition, ...] = (
    # lines, tubes, drains
    _definition(
        "central_line", "Central Line", "critical", "chest_right", (40, 24),
        ["central line", "central venous catheter", "cvc", "triple lumen", "subclavian line"],
        left=_side(60, 24, "chest_left"),
        right=_side(40, 24, "chest_right"),
    ),
    _definition(
        "chest_tube", "Chest Tube", "critical", "chest_right", (38, 35),
        ["chest tube", "thoracostomy tube", "pleural drain"],
        left=_side(62, 35, "chest_left"),
        right=_side(38, 35, "chest_right"),
    ),
    _definition(
        "endotracheal_tube", "Endotracheal Tube", "critical", "head", (50, 10),
        ["endotracheal tube", "endotracheal", "et tube", "intubated"],
    ),
    _definition(
        "tracheostomy", "Tracheostomy", "critical", "neck", (50, 14),
        ["tracheostomy", "trach"],
    ),
    _definition(
        "arterial_line", "Arterial Line", "critical", "right_forearm", (22, 55),
        ["arterial line", "art line", "a-line", "radial arterial"],
        left=_side(78, 55, "left_forearm"),
        right=_side(22, 55, "right_forearm"),
    ),
    _definition(
        "picc_line", "PICC Line", "moderate", "right_arm", (28, 30),
        ["picc line", "picc", "peripherally inserted central catheter"],
        left=_side(72, 30, "left_arm"),
        right=_side(28, 30, "right_arm"),
    ),
    _definition(
        "foley_catheter", "Foley Catheter", "moderate", "pelvis", (50, 58),
        ["foley catheter", "foley", "urinary catheter", "indwelling urinary catheter"],
    ),
    _definition(
        "peripheral_iv", "Peripheral IV", "moderate", "right_forearm", (24, 50),
        ["peripheral iv", "iv line", "saline lock", "piv"],
        left=_side(76, 50, "left_forearm"),
        right=_side(24, 50, "right_forearm"),
    ),
    _definition(
        "ng_tube", "NG Tube", "moderate", "head", (50, 9),
        ["ng tube", "nasogastric"],
    ),
    _definition(
        "peg_tube", "PEG Tube", "moderate", "abdomen", (46, 42),
        ["peg tube", "g-tube", "gastrostomy", "feeding tube"],
    ),
    _definition(
        "surgical_drain", "Surgical Drain", "moderate", "abdomen", (50, 48),
        ["surgical drain", "jp drain", "jackson-pratt", "hemovac"],
        left=_side(56, 48),
        right=_side(44, 48),
    ),
    _definition(
        "wound", "Wound", "moderate", "abdomen", (50, 45),
        ["wound", "incision", "laceration", "surgical site"],
    ),
    _definition(
        "pressure_injury", "Pressure Injury", "moderate", "sacrum", (50, 55),
        ["pressure injury", "pressure ulcer", "bedsore", "decubitus"],
        view="back",
    ),
    # chronic devices
    _definition(
        "ostomy", "Ostomy", "chronic", "abdomen", (58, 50),
        ["colostomy", "ileostomy", "ostomy"],
        left=_side(58, 50),
        right=_side(42, 50),
    ),
    _definition(
        "dialysis_access", "Dialysis Access", "chronic", "left_forearm", (76, 50),
        ["av fistula", "av graft", "dialysis access", "fistula"],
        left=_side(76, 50, "left_forearm"),
        right=_side(24, 50, "right_forearm"),
    ),
    _definition(
        "pacemaker", "Pacemaker", "chronic", "chest_left", (60, 22),
        ["pacemaker", "aicd", "implanted defibrillator"],
    ),
    _definition(
        "insulin_pump", "Insulin Pump", "chronic", "abdomen", (44, 46),
        ["insulin pump", "continuous glucose monitor", "cgm"],
    ),
    # neurological
    _definition(
        "external_ventricular_drain", "External Ventricular Drain", "neurological", "head", (50, 4),
        ["external ventricular drain", "ventriculostomy", "evd"],
        left=_side(54, 4),
        right=_side(46, 4),
    ),
    _definition(
        "vp_shunt", "VP Shunt", "neurological", "head", (46, 8),
        ["vp shunt", "ventriculoperitoneal shunt", "shunt"],
        left=_side(54, 8),
        right=_side(46, 8),
    ),
    # monitoring
    _definition(
        "telemetry", "Telemetry", "monitoring", "chest_left", (56, 30),
        ["telemetry", "cardiac monitor", "holter"],
    ),
    _definition(
        "pulse_oximeter", "Pulse Oximeter", "monitoring", "right_hand", (20, 62),
        ["pulse oximeter", "pulse ox", "spo2 probe"],
        left=_side(80, 62, "left_hand"),
        right=_side(20, 62, "right_hand"),
    ),
    # informational
    _definition(
        "joint_replacement", "Joint Replacement", "informational", "right_thigh", (42, 64),
        ["joint replacement", "hip replacement", "knee replacement", "prosthesis"],
        left=_side(58, 64, "left_thigh"),
        right=_side(42, 64, "right_thigh"),
    ),
    _definition(
        "amputation", "Amputation", "informational", "right_leg", (42, 86),
        ["amputation", "amputee"],
        left=_side(58, 86, "left_leg"),
        right=_side(42, 86, "right_leg"),
    ),
    # status badges: code status
    _definition(
        "code_full", "Full Code", "informational", "head", (50, 6),
        ["full code"],
        badge=("heart-pulse", "green", "FULL"),
    ),
    _definition(
        "code_dnr", "DNR", "critical", "head", (50, 6),
        ["dnr", "do not resuscitate"],
        badge=("heart-off", "red", "DNR"),
    ),
    _definition(
        "code_dni", "DNI", "critical", "head", (50, 6),
        ["dni", "do not intubate"],
        badge=("wind-off", "red", "DNI"),
    ),
    _definition(
        "code_comfort_care", "Comfort Care", "critical", "head", (50, 6),
        ["comfort care", "comfort measures only", "hospice care"],
        badge=("hand-heart", "purple", "CMO"),
    ),
    # status badges: isolation and alerts
    _definition(
        "isolation_contact", "Contact Isolation", "critical", "head", (50, 6),
        ["contact isolation", "contact precautions", "mrsa"],
        badge=("shield", "yellow", "CONTACT"),
    ),
    _definition(
        "isolation_droplet", "Droplet Isolation", "critical", "head", (50, 6),
        ["droplet isolation", "droplet precautions"],
        badge=("droplet", "green", "DROPLET"),
    ),
    _definition(
        "isolation_airborne", "Airborne Isolation", "critical", "head", (50, 6),
        ["airborne isolation", "airborne precautions", "negative pressure room"],
        badge=("wind", "blue", "AIRBORNE"),
    ),
    _definition(
        "isolation_enteric", "Enteric Precautions", "critical", "head", (50, 6),
        ["enteric precautions", "contact plus", "c. diff", "c diff"],
        badge=("shield-plus", "brown", "ENTERIC"),
    ),
    _definition(
        "allergy_alert", "Allergy Alert", "critical", "head", (50, 6),
        ["allergy", "allergies", "allergic to"],
        badge=("alert-triangle", "red", "ALLERGY"),
    ),
    _definition(
        "latex_allergy", "Latex Allergy", "critical", "head", (50, 6),
        ["latex allergy", "latex"],
        badge=("glove", "red", "LATEX"),
    ),
    _definition(
        "difficult_airway", "Difficult Airway", "critical", "neck", (50, 14),
        ["difficult airway", "difficult intubation"],
        badge=("airway", "red", "AIRWAY"),
    ),
    _definition(
        "iv_access_restriction", "No IV Access", "moderate", "head", (50, 6),
        ["no iv access", "no needle sticks", "no venipuncture"],
        badge=("syringe-off", "amber", "NO IV"),
    ),
    _definition(
        "limb_alert", "Limb Alert", "moderate", "head", (50, 6),
        ["limb alert", "restricted limb", "no blood pressure"],
        badge=("hand-off", "pink", "LIMB"),
    ),
    # status badges: precautions
    _definition(
        "fall_risk", "Fall Risk", "monitoring", "head", (50, 6),
        ["fall risk", "fall precautions", "high fall risk"],
        badge=("person-falling", "yellow", "FALL"),
    ),
    _definition(
        "aspiration_precautions", "Aspiration Precautions", "moderate", "head", (50, 6),
        ["aspiration precautions", "aspiration risk", "aspiration"],
        badge=("lungs", "amber", "ASP"),
    ),
    _definition(
        "npo", "NPO", "informational", "head", (50, 6),
        ["npo", "nothing by mouth"],
        badge=("utensils-off", "slate", "NPO"),
    ),
    _definition(
        "seizure_precautions", "Seizure Precautions", "neurological", "head", (50, 6),
        ["seizure precautions", "seizure risk", "seizure"],
        badge=("zap", "purple", "SZ"),
    ),
    _definition(
        "bleeding_precautions", "Bleeding Precautions", "moderate", "head", (50, 6),
        ["bleeding precautions", "bleeding risk", "anticoagulated"],
        badge=("droplet-alert", "red", "BLEED"),
    ),
    _definition(
        "elopement_risk", "Elopement Risk", "monitoring", "head", (50, 6),
        ["elopement risk", "elopement", "wander risk"],
        badge=("door-open", "orange", "ELOPE"),
    ),
)


class MarkerTypeCatalog:
    """마커 타입 정의 위의 불변 색인"""

    def __init__(self, definitions: Iterable[MarkerTypeDefinition]) -> None:
        self._definitions = tuple(definitions)
        self._by_type = {definition.type: definition for definition in self._definitions}

    def __iter__(self) -> Iterator[MarkerTypeDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def get(self, marker_type: str) -> MarkerTypeDefinition | None:
        """타입 키로 정의를 조회

        Args:
            marker_type: 마커 타입 키

        Returns:
            정의 또는 None
        """
        return self._by_type.get(marker_type)

    def is_status_badge(self, marker_type: str) -> bool:
        definition = self._by_type.get(marker_type)
        return definition is not None and definition.is_status_badge


DEFAULT_MARKER_CATALOG = MarkerTypeCatalog(MARKER_TYPES)


def get_definition(marker_type: str) -> MarkerTypeDefinition | None:
    """기본 카탈로그에서 마커 타입 정의를 조회"""
    return DEFAULT_MARKER_CATALOG.get(marker_type)
