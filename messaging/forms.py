# messaging/forms.py

# Import forms from django because each inbound event shape is a form.
from django import forms
# Import constants because ids above the largest stored primary key are rejected here.
from . import constants

"""
One form per inbound WebSocket event type. A payload is only
handed to the delivery engine once its form validates, so unknown
fields are ignored and missing or mistyped ones are rejected at
the socket boundary. Content rules (trimming, length) are left to
the delivery engine so the REST path applies the same checks.
The 'ackId' correlation value is read by messaging.events before
validation, so it is echoed back unchanged on both outcomes.
RT: These validate the JSON frames the browser sends.
"""
class SendMessageForm(forms.Form):
    receiver_id = forms.IntegerField(min_value=1, max_value=constants.MAX_ID)
    content = forms.CharField(required=False, strip=False, empty_value='')

    def clean_content(self):
        # CharField coerces numbers and lists to str, the wire contract is a string
        raw = self.data.get('content')
        if raw is not None and not isinstance(raw, str):
            raise forms.ValidationError('Content must be a string.')
        return self.cleaned_data['content']


class DeleteMessageForm(forms.Form):
    message_id = forms.IntegerField(min_value=1, max_value=constants.MAX_ID)


class TypingForm(forms.Form):
    receiver_id = forms.IntegerField(min_value=1, max_value=constants.MAX_ID)
