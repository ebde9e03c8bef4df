"""Mini README: FastAPI data-access service for LandTrack.

Structure:
    * Request models - pydantic payloads validated before reaching the store.
    * create_application - application factory wiring the record store,
      resolver, dashboard aggregation and settlement calculator into routes.

The service is the boundary that form, dashboard and receipt screens talk
to. Payload validation happens here because the store itself accepts
whatever it is given. Records are returned in their persisted camelCase
shape; derived views use snake_case keys.
"""

from __future__ import annotations

import datetime as dt
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..configuration import get_settings
from ..dashboard import AggregationEngine
from ..exceptions import NotFound, StorageCorrupt
from ..logging_utils import get_logger
from ..records import ExpenseCategory, LandRecordStore
from ..relationships import RelationshipResolver
from ..settlement import SettlementCalculator

LOGGER = get_logger(__name__)


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


def _not_null(value: object) -> object:
    """Partial updates may omit a field but not clear it."""

    if value is None:
        raise ValueError("may be omitted but not set to null")
    return value


class LandCreate(_Payload):
    name: str = Field(..., min_length=1)
    location: str = ""
    area: float = Field(..., gt=0)
    farmer_id: Optional[str] = None


class LandUpdate(_Payload):
    name: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = None
    area: Optional[float] = Field(None, gt=0)
    farmer_id: Optional[str] = None

    @field_validator("name", "location", "area")
    @classmethod
    def _keep_required_values(cls, value: object) -> object:
        # farmer_id stays nullable: sending null unassigns the land.
        return _not_null(value)


class FarmerCreate(_Payload):
    name: str = Field(..., min_length=1)
    cnic: str = ""
    phone: str = ""


class FarmerUpdate(_Payload):
    name: Optional[str] = Field(None, min_length=1)
    cnic: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("name", "cnic", "phone")
    @classmethod
    def _keep_required_values(cls, value: object) -> object:
        return _not_null(value)


class ExpenseCreate(_Payload):
    land_id: str = Field(..., min_length=1)
    category: ExpenseCategory
    amount: float = Field(..., gt=0)
    date: dt.date
    note: str = ""


class CropIncomeCreate(_Payload):
    land_id: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    season: str = Field(..., min_length=1)
    date: Optional[dt.datetime] = None


class SettlementRequest(_Payload):
    land_id: str = Field(..., min_length=1)
    crop_income: float = Field(..., ge=0)


def create_application(store: Optional[LandRecordStore] = None) -> FastAPI:
    """Create the FastAPI application around ``store``.

    Without an explicit store one is built from settings; the application
    then opens it on startup and closes it on shutdown.
    """

    owns_store = store is None
    if store is None:
        store = LandRecordStore.from_settings(get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if owns_store:
            store.open()
            LOGGER.info("Record store contents: %s", store.slot_sizes())
        try:
            yield
        finally:
            if owns_store:
                store.close()

    app = FastAPI(title="LandTrack", version="1.0.0", lifespan=lifespan)
    resolver = RelationshipResolver(store)
    aggregation = AggregationEngine(store)
    calculator = SettlementCalculator(store, resolver)

    @app.exception_handler(StorageCorrupt)
    async def storage_corrupt_handler(request: Request, error: StorageCorrupt) -> JSONResponse:
        LOGGER.error("Request %s failed: %s", request.url.path, error.message)
        return JSONResponse(status_code=500, content={"detail": error.message, "slot": error.slot})

    # -- lands ------------------------------------------------------------

    @app.get("/lands")
    def list_lands() -> JSONResponse:
        """Return lands with their assigned farmer resolved."""

        payload = [
            {**land.as_dict(), "farmer": farmer.as_dict() if farmer else None}
            for land, farmer in resolver.lands_with_farmers()
        ]
        return JSONResponse({"lands": payload})

    @app.post("/lands", status_code=201)
    def add_land(payload: LandCreate) -> JSONResponse:
        land = store.add_land(**payload.model_dump())
        return JSONResponse(land.as_dict(), status_code=201)

    @app.patch("/lands/{land_id}")
    def update_land(land_id: str, payload: LandUpdate) -> JSONResponse:
        try:
            land = store.update_land(land_id, **payload.model_dump(exclude_unset=True))
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        if land is None:
            raise HTTPException(status_code=404, detail=f"Land {land_id} not found")
        return JSONResponse(land.as_dict())

    @app.delete("/lands/{land_id}")
    def delete_land(land_id: str) -> JSONResponse:
        if not store.delete_land(land_id):
            raise HTTPException(status_code=404, detail=f"Land {land_id} not found")
        return JSONResponse({"deleted": land_id})

    @app.get("/lands/{land_id}/expenses")
    def land_expenses(land_id: str) -> JSONResponse:
        expenses = store.get_expenses_by_land(land_id)
        return JSONResponse({"expenses": [expense.as_dict() for expense in expenses]})

    @app.get("/lands/{land_id}/crop-incomes")
    def land_crop_incomes(land_id: str) -> JSONResponse:
        incomes = store.get_crop_incomes_by_land(land_id)
        return JSONResponse({"crop_incomes": [income.as_dict() for income in incomes]})

    # -- farmers ----------------------------------------------------------

    @app.get("/farmers")
    def list_farmers() -> JSONResponse:
        return JSONResponse({"farmers": [farmer.as_dict() for farmer in store.get_farmers()]})

    @app.post("/farmers", status_code=201)
    def add_farmer(payload: FarmerCreate) -> JSONResponse:
        farmer = store.add_farmer(**payload.model_dump())
        return JSONResponse(farmer.as_dict(), status_code=201)

    @app.patch("/farmers/{farmer_id}")
    def update_farmer(farmer_id: str, payload: FarmerUpdate) -> JSONResponse:
        try:
            farmer = store.update_farmer(farmer_id, **payload.model_dump(exclude_unset=True))
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        if farmer is None:
            raise HTTPException(status_code=404, detail=f"Farmer {farmer_id} not found")
        return JSONResponse(farmer.as_dict())

    @app.delete("/farmers/{farmer_id}")
    def delete_farmer(farmer_id: str) -> JSONResponse:
        if not store.delete_farmer(farmer_id):
            raise HTTPException(status_code=404, detail=f"Farmer {farmer_id} not found")
        return JSONResponse({"deleted": farmer_id})

    # -- expenses and income ----------------------------------------------

    @app.get("/expenses")
    def list_expenses() -> JSONResponse:
        """Return expenses labelled with their land's name."""

        lands = store.get_lands()
        payload = [
            {**expense.as_dict(), "landName": resolver.land_name_for(expense, lands)}
            for expense in store.get_expenses()
        ]
        return JSONResponse({"expenses": payload})

    @app.post("/expenses", status_code=201)
    def add_expense(payload: ExpenseCreate) -> JSONResponse:
        expense = store.add_expense(**payload.model_dump())
        return JSONResponse(expense.as_dict(), status_code=201)

    @app.delete("/expenses/{expense_id}")
    def delete_expense(expense_id: str) -> JSONResponse:
        if not store.delete_expense(expense_id):
            raise HTTPException(status_code=404, detail=f"Expense {expense_id} not found")
        return JSONResponse({"deleted": expense_id})

    @app.get("/crop-incomes")
    def list_crop_incomes() -> JSONResponse:
        lands = store.get_lands()
        payload = [
            {**income.as_dict(), "landName": resolver.land_name_for(income, lands)}
            for income in store.get_crop_incomes()
        ]
        return JSONResponse({"crop_incomes": payload})

    @app.post("/crop-incomes", status_code=201)
    def add_crop_income(payload: CropIncomeCreate) -> JSONResponse:
        fields = payload.model_dump()
        if fields["date"] is None:
            fields["date"] = store.now()
        income = store.add_crop_income(**fields)
        return JSONResponse(income.as_dict(), status_code=201)

    # -- derived views ----------------------------------------------------

    @app.get("/dashboard")
    def dashboard() -> JSONResponse:
        return JSONResponse(aggregation.summary().as_dict())

    @app.get("/orphans")
    def orphans() -> JSONResponse:
        """List records whose land or farmer reference no longer resolves."""

        return JSONResponse(
            {
                "expenses": [expense.id for expense in resolver.orphaned_expenses()],
                "crop_incomes": [income.id for income in resolver.orphaned_crop_incomes()],
                "lands_missing_farmer": [land.id for land in resolver.lands_with_missing_farmer()],
            }
        )

    @app.post("/settlements")
    def settle(payload: SettlementRequest) -> JSONResponse:
        try:
            result = calculator.calculate_settlement(payload.land_id, payload.crop_income)
        except NotFound as error:
            raise HTTPException(status_code=404, detail=error.message) from error
        except ValueError as error:
            raise HTTPException(status_code=400, detail=str(error)) from error
        return JSONResponse(result.as_dict())

    return app
