"""
Supabase storage for the poker circuit
"""
