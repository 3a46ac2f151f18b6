"""
Bundled sample data served when no remote or cached copy is available
"""

SAMPLE_CSV = """Name,Company_name,Email,Phone,City,Country
John Doe,Tech Corp,john.doe@email.com,+1-555-0123,New York,USA
Jane Smith,Design Studio,jane.smith@email.com,+1-555-0124,Los Angeles,USA
Mike Johnson,Marketing Inc,mike.johnson@email.com,+1-555-0125,Chicago,USA
Sarah Wilson,Sales Co,sarah.wilson@email.com,+1-555-0126,Miami,USA
David Brown,Consulting Ltd,david.brown@email.com,+1-555-0127,Seattle,USA
"""
