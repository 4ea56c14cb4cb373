"""
clientsync - Client Status Sync to Google Sheets
=================================================

Pulls the client list from the clients API, looks up each client's status
and writes the result to two tabs of a Google spreadsheet.

Modules:
--------
- config.py      : Configuration management (loads settings from .env)
- errors.py      : Error types for every failure the sync knows about
- models.py      : Client/status records and typed stage results
- http_client.py : HTTP client shared by all API calls
- auth.py        : Registration with login fallback
- clients.py     : Paginated client listing with a hard cap
- statuses.py    : Batched status lookups in concurrent waves
- merger.py      : Joins clients with statuses ("Unknown" when missing)
- sheets.py      : Table formatting and Google Sheets writes
- run_sync.py    : Main entry point and orchestration

Usage:
------
    python -m clientsync.run_sync

Workflow:
---------
1. Load configuration from .env file
2. Register the fixed username, falling back to login if it exists
3. List up to 100,000 clients, 1,000 per request
4. Split into two pages of 50,000 (Page1, Page2)
5. Per page: fetch statuses (100 ids per request, 5 requests per wave),
   merge, and overwrite the page's sheet tab

Output:
-------
Each tab holds a header row and one row per client with columns:
id, firstName, lastName, gender, address, city, phone, email, status
"""
