"""Schemas for the lottery widget API."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from luckydraw.services.draw_engine import PRIZE_TIERS

_LEVELS = [t.level for t in PRIZE_TIERS]


class PrizeTierSchema(Schema):
    level = fields.Integer(required=True)
    name = fields.String(attribute="display_name", required=True)
    icon = fields.String(required=True)
    count = fields.Integer(attribute="total_count", required=True)
    unit = fields.String(required=True)
    remaining = fields.Integer(required=False)


class WinnerRecordSchema(Schema):
    level = fields.Integer(required=True)
    time = fields.String(required=True)


class ProbabilityInputsSchema(Schema):
    """Raw edit-form strings keyed by tier level."""

    inputs = fields.Dict(
        keys=fields.Integer(validate=validate.OneOf(_LEVELS)),
        values=fields.String(),
        required=True,
    )

    @validates_schema
    def _validate_not_empty(self, data, **kwargs):  # type: ignore[no-untyped-def]
        if not data.get("inputs"):
            raise ValidationError({"inputs": ["At least one level is required"]})


class ProbabilitiesResponseSchema(Schema):
    probabilities = fields.Dict(keys=fields.String(), values=fields.Float(), required=True)
    inputs = fields.Dict(keys=fields.String(), values=fields.String(), required=True)
    total_probability = fields.Float(required=True)
    warnings = fields.List(fields.String(), required=False)


class ResetRequestSchema(Schema):
    confirm = fields.Boolean(required=True)


class StateResponseSchema(Schema):
    prizes = fields.List(fields.Nested(PrizeTierSchema), required=True)
    winners = fields.List(fields.Nested(WinnerRecordSchema), required=True)
    probabilities = fields.Dict(keys=fields.String(), values=fields.Float(), required=True)
    inputs = fields.Dict(keys=fields.String(), values=fields.String(), required=True)
    total_prizes = fields.Integer(required=True)
    total_remaining = fields.Integer(required=True)
    total_probability = fields.Float(required=True)
    has_remaining = fields.Boolean(required=True)


class DrawResponseSchema(Schema):
    outcome = fields.String(required=True)
    reason = fields.String(required=False, allow_none=True)
    message = fields.String(required=True)
    prize = fields.Nested(PrizeTierSchema, required=False, allow_none=True)
    record = fields.Nested(WinnerRecordSchema, required=False, allow_none=True)
    celebrate = fields.Boolean(required=True)
    total_remaining = fields.Integer(required=True)
    has_remaining = fields.Boolean(required=True)
