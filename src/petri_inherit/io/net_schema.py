# ─────────────────────────────────────────────────────────────────────
# Petri Inherit — Net Document Schema
# © 1998–2026 Miroslav Šotek. All rights reserved.
# ─────────────────────────────────────────────────────────────────────
"""
Strict schema validation for serialized nets using Pydantic.
Catches duplicate ids and dangling arc references before any net is built.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..net.structure import PetriNet

# Roles, data fields and functions use extra='allow' so that their payload
# passes through untouched; only their ids are interpreted.


class PlaceModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str = Field(..., min_length=1)
    tokens: int = Field(default=0, ge=0)
    title: str = ""


class TransitionModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: str = Field(..., min_length=1)
    title: str = ""


class ArcModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    id: Optional[str] = None
    source: str
    destination: str
    type: Literal["regular", "read", "inhibitor", "reset"] = "regular"
    multiplicity: int = Field(default=1, ge=1)

    @field_validator("type", mode="before")
    @classmethod
    def lower_type(cls, v: Any):
        return v.strip().lower() if isinstance(v, str) else v


class RoleModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: str = Field(..., min_length=1)


class DataFieldModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    id: str = Field(..., min_length=1)


class FunctionModel(BaseModel):
    model_config = ConfigDict(extra="allow")
    import_id: str = Field(..., min_length=1)


def _payload(model: BaseModel, key: str) -> Dict[str, Any]:
    return {k: v for k, v in model.model_dump().items() if k != key}


class NetDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = "net"
    title: str = ""
    type: Optional[str] = None
    places: List[PlaceModel] = Field(default_factory=list)
    transitions: List[TransitionModel] = Field(default_factory=list)
    arcs: List[ArcModel] = Field(default_factory=list)
    roles: List[RoleModel] = Field(default_factory=list)
    data: List[DataFieldModel] = Field(default_factory=list)
    functions: List[FunctionModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_identifiers(self):
        node_ids = [p.id for p in self.places] + [t.id for t in self.transitions]
        seen: set = set()
        for node_id in node_ids:
            if node_id in seen:
                raise ValueError(f"duplicate place/transition id '{node_id}'")
            seen.add(node_id)
        for label, ids in (
            ("role", [r.id for r in self.roles]),
            ("data field", [d.id for d in self.data]),
            ("function", [f.import_id for f in self.functions]),
        ):
            if len(ids) != len(set(ids)):
                raise ValueError(f"duplicate {label} id")
        for arc in self.arcs:
            for endpoint in (arc.source, arc.destination):
                if endpoint not in seen:
                    raise ValueError(
                        f"arc {arc.id or arc.source + '->' + arc.destination} "
                        f"references unknown node '{endpoint}'"
                    )
        return self

    def to_net(self) -> PetriNet:
        net = PetriNet(self.id, title=self.title, inheritance_type=self.type)
        for place in self.places:
            net.add_place(place.id, tokens=place.tokens, title=place.title)
        for transition in self.transitions:
            net.add_transition(transition.id, title=transition.title)
        for arc in self.arcs:
            net.add_arc(
                arc.source,
                arc.destination,
                kind=arc.type,
                multiplicity=arc.multiplicity,
                arc_id=arc.id,
            )
        for role in self.roles:
            net.add_role(role.id, _payload(role, "id"))
        for field in self.data:
            net.add_data_field(field.id, _payload(field, "id"))
        for function in self.functions:
            net.add_function(function.import_id, _payload(function, "import_id"))
        return net


def load_net(document: Dict[str, Any]) -> PetriNet:
    """Validate a raw net document and build the PetriNet."""
    return NetDocument.model_validate(document).to_net()


def load_net_file(path: Union[str, Path]) -> PetriNet:
    """Load a net from a JSON file."""
    return load_net(json.loads(Path(path).read_text(encoding="utf-8")))


def _extra(payload: Any) -> Dict[str, Any]:
    return dict(payload) if isinstance(payload, dict) else {}


def dump_net(net: PetriNet) -> Dict[str, Any]:
    """Serialize ``net`` to a document accepted by :func:`load_net`."""
    return {
        "id": net.id,
        "title": net.title,
        "type": net.inheritance_type,
        "places": [
            {"id": p.id, "tokens": p.tokens, "title": p.title} for p in net.places.values()
        ],
        "transitions": [
            {"id": t.id, "title": t.title} for t in net.transitions.values()
        ],
        "arcs": [
            {
                "id": a.id,
                "source": a.source,
                "destination": a.destination,
                "type": a.kind.value,
                "multiplicity": a.multiplicity,
            }
            for a in net.iter_arcs()
        ],
        "roles": [{**_extra(v), "id": k} for k, v in net.roles.items()],
        "data": [{**_extra(v), "id": k} for k, v in net.data_fields.items()],
        "functions": [{**_extra(v), "import_id": k} for k, v in net.functions.items()],
    }
