"""Built-in Excel question bank."""
from __future__ import annotations

from typing import List

from assessment.types import (
    CommonMistake,
    ExpectedAnswer,
    FollowUpTrigger,
    PartialCreditRule,
    Question,
    Rubric,
    RubricCriterion,
    ScoreAbove,
    ScoreBelow,
)
from skills.taxonomy import Difficulty, SkillCategory

QUESTION_BANK: List[Question] = [
    Question(
        question_id="BF-B-001",
        category=SkillCategory.BASIC_FORMULAS,
        difficulty=Difficulty.BASIC,
        text=(
            "How would you calculate the sum of values in cells A1 through A10? "
            "Please explain the formula you would use."
        ),
        expected_answers=[
            ExpectedAnswer(pattern="=SUM(A1:A10)", score=100, explanation="Correct SUM formula with proper range notation"),
            ExpectedAnswer(pattern="SUM(A1:A10)", score=80, explanation="Correct function but missing equals sign"),
            ExpectedAnswer(
                pattern="=A1+A2+A3+A4+A5+A6+A7+A8+A9+A10",
                score=60,
                explanation="Mathematically correct but inefficient approach",
            ),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Formula Syntax", weight=0.4, description="Correct use of equals sign and function syntax"),
                RubricCriterion(name="Range Notation", weight=0.4, description="Proper use of colon notation for ranges"),
                RubricCriterion(name="Function Knowledge", weight=0.2, description="Understanding of SUM function purpose"),
            ],
            common_mistakes=[
                CommonMistake(
                    pattern="missing equals sign",
                    deduction=20,
                    feedback="Remember to start formulas with an equals sign (=)",
                ),
                CommonMistake(
                    pattern="incorrect range syntax",
                    deduction=30,
                    feedback="Use colon (:) to specify ranges, e.g., A1:A10",
                ),
            ],
            partial_credit_rules=[
                PartialCreditRule(
                    condition="mentions SUM function",
                    credit_percentage=50,
                    feedback="Good knowledge of SUM function, but check syntax",
                ),
            ],
        ),
        follow_ups=[
            FollowUpTrigger(
                condition=ScoreBelow(threshold=60),
                question_template="You said: \"{response}\". How would the formula change if the range grew to A1:A100?",
            ),
        ],
        tags=["formulas", "basic", "sum", "ranges"],
    ),
    Question(
        question_id="BF-B-002",
        category=SkillCategory.BASIC_FORMULAS,
        difficulty=Difficulty.BASIC,
        text="If you want to find the average of numbers in cells B1 to B20, what formula would you use?",
        expected_answers=[
            ExpectedAnswer(pattern="=AVERAGE(B1:B20)", score=100, explanation="Perfect AVERAGE formula"),
            ExpectedAnswer(pattern="=SUM(B1:B20)/20", score=85, explanation="Mathematically correct alternative approach"),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Function Selection", weight=0.5, description="Choosing appropriate function for averaging"),
                RubricCriterion(name="Syntax Accuracy", weight=0.5, description="Correct formula syntax and range specification"),
            ],
            common_mistakes=[
                CommonMistake(pattern="AVG(", deduction=15, feedback="The function is AVERAGE, not AVG in Excel"),
            ],
        ),
        tags=["formulas", "basic", "average", "statistics"],
    ),
    Question(
        question_id="BF-I-001",
        category=SkillCategory.BASIC_FORMULAS,
        difficulty=Difficulty.INTERMEDIATE,
        text=(
            "Column C holds exam scores. Write a formula for D2 that shows \"Pass\" when C2 is at least 50 "
            "and \"Fail\" otherwise."
        ),
        expected_answers=[
            ExpectedAnswer(pattern="=IF(C2>=50,\"Pass\",\"Fail\")", score=100, explanation="Correct IF with inclusive threshold"),
            ExpectedAnswer(pattern="=IF(C2<50,\"Fail\",\"Pass\")", score=100, explanation="Equivalent inverted condition"),
            ExpectedAnswer(pattern="=IF(C2>50,\"Pass\",\"Fail\")", score=70, explanation="Off by one at the boundary"),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Logical Test", weight=0.5, description="Correct comparison operator and threshold"),
                RubricCriterion(name="Branch Values", weight=0.5, description="Text results quoted in the right branches"),
            ],
            partial_credit_rules=[
                PartialCreditRule(condition="if function", credit_percentage=40, feedback="Right function, refine the arguments"),
            ],
        ),
        tags=["formulas", "logical", "if"],
    ),
    Question(
        question_id="DM-B-001",
        category=SkillCategory.DATA_MANIPULATION,
        difficulty=Difficulty.BASIC,
        text="How would you remove duplicate customer rows from a table that has a Customer ID column?",
        expected_answers=[
            ExpectedAnswer(pattern="remove duplicates", score=100, explanation="Data > Remove Duplicates on the ID column"),
            ExpectedAnswer(pattern="=UNIQUE(", score=90, explanation="Dynamic array alternative"),
            ExpectedAnswer(pattern="advanced filter", score=80, explanation="Advanced Filter with unique records only"),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Tool Choice", weight=0.6, description="Picks a deduplication feature"),
                RubricCriterion(name="Key Column", weight=0.4, description="Deduplicates on the identifying column"),
            ],
            common_mistakes=[
                CommonMistake(pattern="delete manually", deduction=20, feedback="Manual deletion does not scale and is error prone"),
            ],
            partial_credit_rules=[
                PartialCreditRule(condition="sort by customer id", credit_percentage=30, feedback="Sorting helps spot duplicates but does not remove them"),
            ],
        ),
        tags=["cleaning", "duplicates", "basic"],
    ),
    Question(
        question_id="DM-I-001",
        category=SkillCategory.DATA_MANIPULATION,
        difficulty=Difficulty.INTERMEDIATE,
        text=(
            "You have a list of employee names in column A and their salaries in column B. How would you find "
            "the salary of a specific employee, say 'John Smith', using a lookup function?"
        ),
        expected_answers=[
            ExpectedAnswer(pattern="=VLOOKUP(\"John Smith\",A:B,2,FALSE)", score=100, explanation="Perfect VLOOKUP with exact match"),
            ExpectedAnswer(pattern="=INDEX(B:B,MATCH(\"John Smith\",A:A,0))", score=100, explanation="Excellent INDEX-MATCH combination"),
            ExpectedAnswer(pattern="=XLOOKUP(\"John Smith\",A:A,B:B)", score=100, explanation="Modern XLOOKUP function (Excel 365)"),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Function Choice", weight=0.4, description="Selecting appropriate lookup function"),
                RubricCriterion(name="Parameters", weight=0.4, description="Correct function parameters and syntax"),
                RubricCriterion(name="Match Type", weight=0.2, description="Understanding of exact vs approximate match"),
            ],
            common_mistakes=[
                CommonMistake(
                    pattern="missing FALSE parameter",
                    deduction=25,
                    feedback="For exact matches, use FALSE as the last parameter in VLOOKUP",
                ),
                CommonMistake(
                    pattern="wrong column index",
                    deduction=30,
                    feedback="Column index should be 2 for the second column (salary)",
                ),
            ],
            partial_credit_rules=[
                PartialCreditRule(
                    condition="vlookup",
                    credit_percentage=60,
                    feedback="Good understanding of lookup concept, refine the syntax",
                ),
            ],
        ),
        follow_ups=[
            FollowUpTrigger(
                condition=ScoreAbove(threshold=85),
                question_template="How would you return a friendly message instead of #N/A when the name is missing?",
            ),
        ],
        tags=["lookup", "vlookup", "data-retrieval", "intermediate"],
    ),
    Question(
        question_id="PT-I-001",
        category=SkillCategory.PIVOT_TABLES,
        difficulty=Difficulty.INTERMEDIATE,
        text=(
            "You have sales data with columns for Date, Salesperson, Product, and Amount. How would you create "
            "a pivot table to show total sales by salesperson and product?"
        ),
        expected_answers=[
            ExpectedAnswer(
                pattern="salesperson to rows, product to columns, amount to values",
                score=100,
                explanation="Perfect pivot table structure understanding",
            ),
            ExpectedAnswer(
                pattern="salesperson in row area, product in column area, sum of amount in data area",
                score=95,
                explanation="Correct understanding with different terminology",
            ),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Field Placement", weight=0.5, description="Correct placement of fields in pivot table areas"),
                RubricCriterion(name="Aggregation Understanding", weight=0.3, description="Understanding of sum aggregation for amounts"),
                RubricCriterion(name="Structure Logic", weight=0.2, description="Logical organization of data dimensions"),
            ],
            common_mistakes=[
                CommonMistake(pattern="amount to rows", deduction=40, feedback="Amount should go in the Values area for aggregation"),
            ],
            partial_credit_rules=[
                PartialCreditRule(
                    condition="insert pivot table",
                    credit_percentage=40,
                    feedback="Good awareness of pivot tables, focus on field placement",
                ),
            ],
        ),
        tags=["pivot-tables", "data-analysis", "aggregation", "intermediate"],
    ),
    Question(
        question_id="PT-A-001",
        category=SkillCategory.PIVOT_TABLES,
        difficulty=Difficulty.ADVANCED,
        text="In a pivot table of sales, how would you show each product's profit margin when only Revenue and Cost fields exist?",
        expected_answers=[
            ExpectedAnswer(pattern="calculated field", score=100, explanation="Calculated field = (Revenue - Cost) / Revenue"),
            ExpectedAnswer(pattern="power pivot measure", score=95, explanation="DAX measure in the data model"),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Feature Choice", weight=0.6, description="Uses a calculated field or measure"),
                RubricCriterion(name="Formula", weight=0.4, description="Margin computed from aggregated values"),
            ],
            common_mistakes=[
                CommonMistake(pattern="average of margins", deduction=30, feedback="Averaging row margins weights small sales too heavily"),
            ],
        ),
        tags=["pivot-tables", "calculated-field", "advanced"],
    ),
    Question(
        question_id="AF-A-001",
        category=SkillCategory.ADVANCED_FUNCTIONS,
        difficulty=Difficulty.ADVANCED,
        text=(
            "How would you create a formula that counts the number of cells in column A that contain text "
            "starting with 'Project' and have a corresponding value in column B greater than 1000?"
        ),
        expected_answers=[
            ExpectedAnswer(pattern="=COUNTIFS(A:A,\"Project*\",B:B,\">1000\")", score=100, explanation="Perfect COUNTIFS with multiple criteria"),
            ExpectedAnswer(
                pattern="=SUMPRODUCT((LEFT(A:A,7)=\"Project\")*(B:B>1000))",
                score=95,
                explanation="Advanced SUMPRODUCT approach",
            ),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Function Selection", weight=0.4, description="Choosing appropriate multi-criteria function"),
                RubricCriterion(name="Criteria Syntax", weight=0.4, description="Correct syntax for text and numeric criteria"),
                RubricCriterion(name="Wildcard Usage", weight=0.2, description="Understanding of wildcard characters"),
            ],
            common_mistakes=[
                CommonMistake(pattern="=COUNTIF(", deduction=50, feedback="COUNTIFS is needed for multiple criteria, not COUNTIF"),
            ],
            partial_credit_rules=[
                PartialCreditRule(
                    condition="multiple criteria",
                    credit_percentage=60,
                    feedback="Good understanding of the requirement for multiple conditions",
                ),
            ],
        ),
        tags=["advanced-functions", "countifs", "criteria", "wildcards"],
    ),
    Question(
        question_id="DV-B-001",
        category=SkillCategory.DATA_VISUALIZATION,
        difficulty=Difficulty.BASIC,
        text="What chart would you use to compare this quarter's sales across five regions?",
        expected_answers=[
            ExpectedAnswer(pattern="column chart", score=100, explanation="Column charts compare categories clearly"),
            ExpectedAnswer(pattern="bar chart", score=100, explanation="Bar charts compare categories clearly"),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Chart Type Selection", weight=1.0, description="Categorical comparison chart"),
            ],
            common_mistakes=[
                CommonMistake(pattern="line chart", deduction=30, feedback="Line charts imply continuity between regions"),
            ],
        ),
        tags=["charts", "visualization", "comparison"],
    ),
    Question(
        question_id="DV-I-001",
        category=SkillCategory.DATA_VISUALIZATION,
        difficulty=Difficulty.INTERMEDIATE,
        text=(
            "You have monthly sales data for the past year. What type of chart would be most appropriate to "
            "show the trend over time, and how would you create it?"
        ),
        expected_answers=[
            ExpectedAnswer(pattern="line chart", score=100, explanation="Line charts are perfect for showing trends over time"),
            ExpectedAnswer(pattern="area chart", score=85, explanation="Area charts can also show trends effectively"),
            ExpectedAnswer(pattern="column chart", score=70, explanation="Column charts work but are less ideal for time series"),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Chart Type Selection", weight=0.6, description="Choosing appropriate chart for time series data"),
                RubricCriterion(name="Creation Process", weight=0.4, description="Understanding of chart creation steps"),
            ],
            common_mistakes=[
                CommonMistake(pattern="pie chart", deduction=60, feedback="Pie charts are not suitable for time series data"),
            ],
        ),
        tags=["charts", "visualization", "trends", "time-series"],
    ),
    Question(
        question_id="MV-A-001",
        category=SkillCategory.MACROS_VBA,
        difficulty=Difficulty.ADVANCED,
        text=(
            "How would you create a simple macro to automatically format a selected range of cells with bold "
            "text and yellow background?"
        ),
        expected_answers=[
            ExpectedAnswer(
                pattern="Selection.Font.Bold = True",
                score=100,
                explanation="Correct VBA syntax for formatting",
            ),
            ExpectedAnswer(pattern="record macro", score=80, explanation="Good understanding of macro recorder approach"),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="VBA Syntax", weight=0.5, description="Correct VBA code syntax"),
                RubricCriterion(name="Object Model", weight=0.3, description="Understanding of Excel object model"),
                RubricCriterion(name="Approach", weight=0.2, description="Logical approach to automation"),
            ],
            common_mistakes=[
                CommonMistake(pattern="activecell.font", deduction=40, feedback="Use Selection object to reference selected cells"),
            ],
            partial_credit_rules=[
                PartialCreditRule(
                    condition="macro recorder",
                    credit_percentage=50,
                    feedback="Macro recorder is a good starting point for learning VBA",
                ),
            ],
        ),
        tags=["macros", "vba", "automation", "advanced"],
    ),
    Question(
        question_id="DMO-A-001",
        category=SkillCategory.DATA_MODELING,
        difficulty=Difficulty.ADVANCED,
        text=(
            "You need to create a financial model that calculates monthly loan payments. What function would "
            "you use, and what parameters does it require?"
        ),
        expected_answers=[
            ExpectedAnswer(pattern="=PMT(rate/12, nper*12, pv)", score=100, explanation="Perfect PMT function with proper parameter adjustment"),
            ExpectedAnswer(pattern="PMT function with rate, periods, present value", score=85, explanation="Good understanding of PMT function components"),
        ],
        rubric=Rubric(
            max_score=100,
            criteria=[
                RubricCriterion(name="Function Knowledge", weight=0.4, description="Knowledge of PMT function"),
                RubricCriterion(name="Parameter Understanding", weight=0.4, description="Understanding of rate, nper, pv parameters"),
                RubricCriterion(name="Period Adjustment", weight=0.2, description="Adjusting annual rate to monthly"),
            ],
            common_mistakes=[
                CommonMistake(pattern="annual rate", deduction=30, feedback="Remember to divide annual rate by 12 for monthly payments"),
            ],
        ),
        tags=["financial-modeling", "pmt", "loans", "advanced"],
    ),
]


__all__ = ["QUESTION_BANK"]
