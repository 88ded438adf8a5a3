"""
monday.com sync service.

Keeps monday.com boards in step with uploaded files and Zoho CRM data:
- Re-uploads webhook files to every item sharing the same email
- Archives CRM email history as PDFs on the matching items
- Migrates CRM lead owner/notes onto board items
"""
