"""
Pydantic models for dataset rows and analysis output

Dataset field names follow the San Francisco open data exports:
- Land Use (LandUse2016.csv): one row per lot
- Zoning Map - Zoning Districts
- Building Footprints
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if value == "":
            return None
    return value


# ============================================================
# Dataset Rows
# ============================================================

class LandUseRecord(BaseModel):
    """Lot (parcel) attributes"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    blklot: str = Field(alias="BLKLOT")
    mapblklot: str = Field("", alias="MAPBLKLOT")
    the_geom: str
    from_st: Optional[int] = Field(None, alias="FROM_ST")
    to_st: Optional[int] = Field(None, alias="TO_ST")
    street: str = Field("", alias="STREET")
    st_type: str = Field("", alias="ST_TYPE")
    resunits: int = Field(0, alias="RESUNITS")
    bldgsqft: int = Field(0, alias="BLDGSQFT")
    yrbuilt: Optional[int] = Field(None, alias="YRBUILT")
    landuse: str = Field("", alias="LANDUSE")
    shape_area: Optional[float] = Field(None, alias="SHAPE_Area")

    @field_validator("from_st", "to_st", "yrbuilt", "shape_area", mode="before")
    @classmethod
    def _optional_number(cls, value):
        return _blank_to_none(value)

    @field_validator("resunits", "bldgsqft", mode="before")
    @classmethod
    def _count(cls, value):
        value = _blank_to_none(value)
        return 0 if value is None else value

    @property
    def address(self) -> str:
        from_st = str(self.from_st) if self.from_st is not None else "?"
        to_st = str(self.to_st) if self.to_st is not None else "?"
        return f"{from_st}-{to_st} {self.street} {self.st_type}".strip()


class ZoningDistrict(BaseModel):
    """Zoning district attributes"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    the_geom: str
    objectid: str = Field("", alias="OBJECTID")
    zoning: str
    zoning_sim: str = ""
    districtname: str = ""
    gen: str = ""
    codesection: str = ""


class BuildingFootprintRecord(BaseModel):
    """Building footprint attributes"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    sf16_bldgid: str = ""
    mblr: str
    shape: str
    hgt_maxcm: Optional[float] = None

    @field_validator("hgt_maxcm", mode="before")
    @classmethod
    def _comma_float(cls, value):
        return _blank_to_none(value)

    @property
    def height_ft(self) -> Optional[float]:
        if self.hgt_maxcm is None:
            return None
        return self.hgt_maxcm / 2.54 / 12.0


# ============================================================
# Analysis Output
# ============================================================

class SetbackAndAnnotation(BaseModel):
    side_type: str
    setback: float


class NeighborhoodStats(BaseModel):
    radius_ft: float
    num_neighbors: int
    num_neighbor_units: int
    neighbor_bldgsqft: float
    neighbor_mean_unit_size: Optional[float] = None


class FootprintAnalysis(BaseModel):
    """One analysed building footprint and the lot it sits on"""
    mblr: str
    building_id: str = ""
    building_area: float
    height: Optional[float] = None

    lot_blklot: Optional[str] = None
    addr: Optional[str] = None
    lot_area: Optional[float] = None
    yrbuilt: Optional[int] = None
    resunits: int = 0
    lot_coverage: Optional[float] = None

    zoning_district_name: Optional[str] = None
    side_setbacks: Optional[List[SetbackAndAnnotation]] = None
    neighborhood: Optional[NeighborhoodStats] = None

    geojson: Dict[str, Any] = Field(default_factory=dict)
    building_wkt: str
    lot_wkt: Optional[str] = None

    def min_setback(self, side_type: str) -> Optional[float]:
        """Smallest setback measured against edges of the given type"""
        values = [s.setback for s in self.side_setbacks or [] if s.side_type == side_type]
        return min(values) if values else None
