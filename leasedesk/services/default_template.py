"""
Built-in lease template, created on first use when no default exists.
"""
import json

DEFAULT_TEMPLATE_NAME = "Professional Lease Agreement Template"
DEFAULT_TEMPLATE_DESCRIPTION = "Professional lease agreement template with watermark and modern design"

# Placeholder name -> what it renders to
TEMPLATE_VARIABLES = {
    "TenantName": "Full name of the tenant",
    "TenantContact": "Contact number",
    "TenantEmergencyContact": "Emergency contact name",
    "TenantEmergencyNumber": "Emergency contact number",
    "RoomNumber": "Room identifier",
    "RoomType": "Type of room",
    "StartDate": "Lease start date",
    "EndDate": "Lease end date",
    "RentAmount": "Monthly rent amount",
    "ExpectedRentDay": "Day of month rent is due",
    "LeaseAgreementId": "Unique lease identifier",
    "GeneratedDate": "Document generation date",
    "GeneratedTime": "Document generation time",
    "LeaseDurationMonths": "Duration in months",
    "CompanyName": "Property management company name",
    "CompanyAddress": "Company address",
    "CompanyPhone": "Company phone number",
    "CompanyEmail": "Company email address",
}


def template_variables_json() -> str:
    return json.dumps(TEMPLATE_VARIABLES)


DEFAULT_TEMPLATE_HTML = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Lease Agreement - {{LeaseAgreementId}}</title>
<style>
  * { margin: 0; padding: 0; box-sizing: border-box; }
  body {
    font-family: 'Inter', -apple-system, 'Segoe UI', Arial, sans-serif;
    font-size: 14px; line-height: 1.7; color: #1a202c; background: #f8fafc;
  }
  body::before {
    content: 'PROPERTY MANAGEMENT SOLUTIONS';
    position: fixed; top: 50%; left: 50%;
    transform: translate(-50%, -50%) rotate(-45deg);
    font-size: 64px; font-weight: 700; letter-spacing: 8px;
    color: rgba(59, 130, 246, 0.08); white-space: nowrap; z-index: 0;
  }
  .container { max-width: 900px; margin: 0 auto; padding: 48px 40px; background: #fff; position: relative; z-index: 1; }
  .header {
    text-align: center; padding: 32px 0; margin-bottom: 36px; border-radius: 14px; color: #fff;
    background: linear-gradient(135deg, #1e3a8a 0%, #3b82f6 60%, #60a5fa 100%);
  }
  .header h1 { font-size: 34px; letter-spacing: 3px; text-transform: uppercase; }
  .header h2 { font-size: 20px; font-weight: 500; margin: 8px 0 14px; }
  .header .contact-info { font-size: 13px; opacity: 0.9; }
  .document-info, .section {
    padding: 24px; margin-bottom: 28px; border-radius: 12px;
    border: 1px solid rgba(59, 130, 246, 0.2); background: #f0f9ff;
  }
  .section { background: #fff; border-color: #e2e8f0; }
  h3, .section h2 { color: #1e40af; margin-bottom: 14px; }
  .info-grid { display: grid; grid-template-columns: repeat(2, 1fr); gap: 18px; margin-bottom: 28px; }
  .info-card { padding: 20px; border-radius: 12px; border: 1px solid #e2e8f0; border-top: 4px solid #3b82f6; }
  .info-card h4 { color: #1e40af; margin-bottom: 10px; }
  .info-card p { color: #475569; margin: 4px 0; }
  .terms-list { padding-left: 22px; }
  .terms-list li { margin-bottom: 12px; }
  .rent { color: #dc2626; font-weight: 700; font-size: 16px; }
  .signature-section {
    margin-top: 36px; padding: 28px; border-radius: 16px;
    border: 2px solid #16a34a; background: #f0fdf4;
  }
  .signature-section h2 { color: #166534; text-align: center; margin-bottom: 16px; }
  .digital-signature {
    margin-top: 28px; padding: 24px; border-radius: 12px;
    border: 2px solid #2c3e50; background: #fff;
  }
  .digital-signature .signature-header { font-size: 18px; font-weight: 700; color: #2c3e50; margin-bottom: 12px; }
  .digital-signature .signature-details { display: grid; grid-template-columns: 1fr 1fr; gap: 12px; }
  .digital-signature .signature-image { text-align: center; margin: 18px 0; }
  .footer { margin-top: 40px; padding: 20px; text-align: center; color: #d1d5db; font-size: 12px; background: #1f2937; border-radius: 12px; }
</style>
</head>
<body>
<div class="container">
  <div class="header">
    <h1>Lease Agreement</h1>
    <h2>{{CompanyName}}</h2>
    <div class="contact-info">
      {{CompanyAddress}}<br>
      {{CompanyPhone}} | {{CompanyEmail}}
    </div>
  </div>

  <div class="document-info">
    <h3>Document Information</h3>
    <p><strong>Agreement ID:</strong> {{LeaseAgreementId}}</p>
    <p><strong>Generated:</strong> {{GeneratedDate}} at {{GeneratedTime}}</p>
    <p><strong>Duration:</strong> {{LeaseDurationMonths}} months</p>
  </div>

  <div class="info-grid">
    <div class="info-card">
      <h4>Tenant</h4>
      <p><strong>Name:</strong> {{TenantName}}</p>
      <p><strong>Contact:</strong> {{TenantContact}}</p>
      <p><strong>Emergency Contact:</strong> {{TenantEmergencyContact}}</p>
      <p><strong>Emergency Phone:</strong> {{TenantEmergencyNumber}}</p>
    </div>
    <div class="info-card">
      <h4>Property</h4>
      <p><strong>Room Number:</strong> {{RoomNumber}}</p>
      <p><strong>Room Type:</strong> {{RoomType}}</p>
    </div>
    <div class="info-card">
      <h4>Rent</h4>
      <p><strong>Monthly Rent:</strong> <span class="rent">{{RentAmount}}</span></p>
      <p><strong>Due Date:</strong> {{ExpectedRentDay}} of each month</p>
    </div>
    <div class="info-card">
      <h4>Term</h4>
      <p><strong>Start Date:</strong> {{StartDate}}</p>
      <p><strong>End Date:</strong> {{EndDate}}</p>
    </div>
  </div>

  <div class="section">
    <h2>Terms and Conditions</h2>
    <ol class="terms-list">
      <li><strong>Payment Terms:</strong> Rent of {{RentAmount}} is due on the {{ExpectedRentDay}} of each month. Late payments may incur additional charges as per local regulations.</li>
      <li><strong>Lease Term:</strong> This agreement runs from {{StartDate}} to {{EndDate}} ({{LeaseDurationMonths}} months).</li>
      <li><strong>Use of Premises:</strong> Room {{RoomNumber}} shall be used solely as a private residence by the tenant named above.</li>
      <li><strong>Maintenance:</strong> The tenant shall keep the premises clean and report defects to {{CompanyName}} promptly.</li>
      <li><strong>Utilities:</strong> Utility charges are billed separately unless otherwise agreed in writing.</li>
      <li><strong>Termination:</strong> Either party may terminate this agreement with one calendar month's written notice.</li>
    </ol>
  </div>

  <div class="signature-section">
    <h2>Tenant Acknowledgment</h2>
    <p>By signing this agreement digitally, {{TenantName}} confirms having read and understood all terms above and agrees to be bound by them.</p>
  </div>

  <div class="footer">
    <p>{{CompanyName}} | {{CompanyPhone}} | {{CompanyEmail}}</p>
    <p>&copy; {{GeneratedDate}} {{CompanyName}}. All rights reserved.</p>
  </div>
</div>
</body>
</html>
"""
