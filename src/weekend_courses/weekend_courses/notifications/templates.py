"""Jinja2 bodies for outgoing mail."""

REGISTRATION_APPROVED_SUBJECT = "Your registration for {{ course_name }} is approved"
REGISTRATION_APPROVED = """
<html>
<body style="font-family: Arial, sans-serif;">
    <h2>Welcome, {{ full_name }}!</h2>
    <p>Your registration for <strong>{{ course_name }}</strong> has been approved.</p>
    <p>You have been placed in <strong>{{ class_name }}</strong>. Your weekend sessions:</p>
    <ul>
    {% for s in sessions %}
        <li>{{ s }}</li>
    {% endfor %}
    </ul>
    {% if has_qr %}
    <p>Your attendance QR code is attached. Show it to your teacher at the start of every session.</p>
    {% endif %}
</body>
</html>
"""

REGISTRATION_REJECTED_SUBJECT = "Your registration for {{ course_name }}"
REGISTRATION_REJECTED = """
<html>
<body style="font-family: Arial, sans-serif;">
    <h2>Hello {{ full_name }},</h2>
    <p>Unfortunately your registration for <strong>{{ course_name }}</strong> was not approved.</p>
    {% if reason %}<p>Reason: {{ reason }}</p>{% endif %}
</body>
</html>
"""

PASSWORD_RESET_SUBJECT = "Your password has been reset"
PASSWORD_RESET = """
<html>
<body style="font-family: Arial, sans-serif;">
    <h2>Hello {{ full_name }},</h2>
    <p>An administrator has reset your password. Your temporary password is:</p>
    <p style="font-size: 18px;"><strong>{{ temporary_password }}</strong></p>
    <p>Please sign in and change it straight away.</p>
</body>
</html>
"""
