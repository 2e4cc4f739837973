# Supabase tables: support_tickets, system_logs

"""
Expected Supabase table structure:

support_tickets:
- id: uuid (primary key)
- user_id: uuid (nullable, references profiles.id)
- subject: text (not null)
- message: text (not null)
- status: text ('open' | 'in_progress' | 'resolved', default: 'open')
- created_at: timestamp (default: now())

system_logs:
- id: bigint (primary key)
- event_type: text (e.g. 'auth', 'security', 'billing')
- message: text
- user_id: uuid (nullable)
- ip_address: text (nullable)
- created_at: timestamp (default: now())
"""
