"""
Regimen Decision & Dosage-Lock Engine

    markers/   free-text markers → numeric values
    clinical/  pathway and regimen rule table
    dosing/    dose formulas
    plan/      lock state machine and schedule expansion
"""
