"""
Club 6713 Members Portal

Members-only portal: dashboard, event requests, personal training, room booking
"""
