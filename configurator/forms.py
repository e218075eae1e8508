from django import forms

from catalog.schema import CATEGORIES

from .services.insights import INSIGHT_MODES

CATEGORY_CHOICES = [(c, c.replace("_", " ").title()) for c in CATEGORIES]
MODE_CHOICES = [(m, m.title()) for m in INSIGHT_MODES]


class SelectComponentForm(forms.Form):
    category = forms.ChoiceField(choices=CATEGORY_CHOICES)
    component_id = forms.IntegerField(min_value=1)


class RemoveComponentForm(forms.Form):
    category = forms.ChoiceField(choices=CATEGORY_CHOICES)
    # Only used for RAM, where several kits can be selected.
    component_id = forms.IntegerField(min_value=1, required=False)


class InsightOptionsForm(forms.Form):
    mode = forms.ChoiceField(choices=MODE_CHOICES, required=False)
    advanced = forms.BooleanField(required=False)

    def clean_mode(self):
        return self.cleaned_data.get("mode") or "standard"


class SaveConfigurationForm(forms.Form):
    name = forms.CharField(max_length=120, required=False)


class BuildRequestForm(forms.Form):
    name = forms.CharField(max_length=120, label="Full name")
    email = forms.EmailField(label="Email")
    phone = forms.CharField(max_length=40, required=False, label="Phone")
    notes = forms.CharField(
        required=False,
        label="Notes",
        widget=forms.Textarea(attrs={"rows": 3, "placeholder": "Anything we should know?"}),
    )
