"""
Streamlit UI for the notetaker application.
"""
