"""CSV import/export resources for the election set-up tables."""

from typing import Any, override

from import_export import fields, resources

from core.models import DEFAULT_THEME_COLOR, Candidate, PollingUnit


class CandidateResource(resources.ModelResource):
    number = fields.Field(attribute="number", column_name="Number")
    name = fields.Field(attribute="name", column_name="Name")
    party_name = fields.Field(attribute="party_name", column_name="Party")
    photo_url = fields.Field(attribute="photo_url", column_name="Photo URL")
    theme_color = fields.Field(attribute="theme_color", column_name="Theme Color")

    class Meta:
        model = Candidate
        import_id_fields = ("number",)
        fields = ("number", "name", "party_name", "photo_url", "theme_color")
        skip_unchanged = True
        report_skipped = True

    @override
    def before_import_row(self, row: Any, **kwargs: Any) -> None:
        if not str(row.get("Theme Color") or "").strip():
            row["Theme Color"] = DEFAULT_THEME_COLOR
        if row.get("Photo URL") is None:
            row["Photo URL"] = ""


class PollingUnitResource(resources.ModelResource):
    name = fields.Field(attribute="name", column_name="Name")
    grade = fields.Field(attribute="grade", column_name="Grade")
    total_eligible = fields.Field(attribute="total_eligible", column_name="Eligible Voters")
    ballots_issued = fields.Field(attribute="ballots_issued", column_name="Ballots Issued")

    class Meta:
        model = PollingUnit
        import_id_fields = ("name", "grade")
        fields = ("name", "grade", "total_eligible", "ballots_issued")
        skip_unchanged = True
        report_skipped = True

    @override
    def before_import_row(self, row: Any, **kwargs: Any) -> None:
        for column in ("Eligible Voters", "Ballots Issued"):
            if not str(row.get(column) or "").strip():
                row[column] = 0
