from django import forms

from .countries import ScanBreadth, normalize_breadth

MAX_APPS = 200


class TrendingQueryForm(forms.Form):
    """Query for a trending scan: a list of app ids and a scan breadth."""

    apps = forms.CharField(
        label="App IDs",
        help_text=f"One or more App Store ids, separated by commas (max {MAX_APPS}).",
    )
    # Free text so an unknown breadth degrades to 'quick' instead of failing
    breadth = forms.CharField(
        required=False,
        label="Scan breadth",
        help_text="One of: " + ", ".join(ScanBreadth.values),
    )

    def clean_apps(self):
        raw = self.cleaned_data["apps"]
        app_ids = list(dict.fromkeys(a.strip() for a in raw.split(",") if a.strip()))
        if not app_ids:
            raise forms.ValidationError("Provide at least one app id.")
        if len(app_ids) > MAX_APPS:
            raise forms.ValidationError(f"At most {MAX_APPS} app ids per scan.")
        return app_ids

    def clean_breadth(self):
        return normalize_breadth(self.cleaned_data.get("breadth") or ScanBreadth.QUICK)
