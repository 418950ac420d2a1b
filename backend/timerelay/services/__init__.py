# Services package init
"""
TimeRelay Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and the two hosted APIs.
How:   Services receive their remote clients and settings in the constructor.
       The application factory builds one instance of each and route handlers
       get them through FastAPI dependencies.

Service Inventory:
    - RecordStore (abstract) / NotionRecordStore: query and create Notion pages
    - SpreadsheetClient (abstract) / GoogleSheetsClient: report destination
    - notion_properties: read/build Notion property values and filters
    - TrackingService: clients, demands, time entries
    - ReportService: weekly hours-per-demand aggregation and export
"""
