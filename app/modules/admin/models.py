# Supabase tables: profiles, user_status, subscriptions, plans,
# subscription_requests, exchange_rates
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- full_name: text (nullable)
- email: text (nullable)
- role: text (default: 'user'; 'superadmin' rows are hidden from admin views)
- created_at: timestamp (default: now())

user_status:
- user_id: uuid (primary key, references profiles.id)
- is_active: boolean (default: true)

plans:
- id: text (primary key, e.g. 'plan-free', 'plan-pro')
- name: text (not null; a 'Free' row is required by the signup trigger)
- price: numeric (monthly price)
- currency: text (nullable)
- features: jsonb (nullable)

subscriptions:
- id: uuid (primary key)
- user_id: uuid (unique, references profiles.id)
- plan_id: text (references plans.id)
- status: text ('active' | 'trial' | 'expired' | 'cancelled')
- current_period_start: timestamp (nullable)
- current_period_end: timestamp (nullable)
- updated_at: timestamp (nullable)

subscription_requests:
- id: uuid (primary key)
- user_id: uuid (references profiles.id)
- plan_id: text (references plans.id)
- status: text ('pending' | 'approved' | 'rejected')
- requested_at: timestamp (default: now())
- resolved_at: timestamp (nullable)

exchange_rates:
- id: bigint (primary key)
- from_currency: text
- to_currency: text
- rate: numeric
- rate_date: date (nullable)

Note: a signup trigger on auth.users inserts the profiles row, a
user_status row and a Free subscription. Users created before the
trigger existed may have neither; they read as active / no plan.
"""
